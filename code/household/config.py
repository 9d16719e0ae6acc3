"""
config.py

Ledger constants for the household cashflow engine.

Everything the classifier and summarizer need to know about the household's
taxonomy lives in one frozen LedgerConfig. Callers pass it explicitly; the
module-level DEFAULT_CONFIG is only a convenience default and is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple


# ======================================================
# FEED FIELD LABELS (spreadsheet column headers)
# ======================================================

@dataclass(frozen=True)
class FieldNames:
    date: str = "日付"
    amount: str = "金額（円）"
    kind: str = "区分"
    category: str = "大項目"
    subcategory: str = "中項目"
    content: str = "内容"
    memo: str = "メモ"
    target: str = "計算対象"


@dataclass(frozen=True)
class InstallmentItem:
    name: str
    amount: int
    completion_date: str


# ======================================================
# LEDGER CONFIG (keep explicit + auditable)
# ======================================================

@dataclass(frozen=True)
class LedgerConfig:
    fields: FieldNames = field(default_factory=FieldNames)

    type_income: str = "収入"
    type_expense: str = "支出"
    type_adjust: str = "調整"

    # Hint sets are checked in this order: adjust, income, expense.
    adjust_hints: Tuple[str, ...] = ("調整", "返金", "振替", "相殺")
    income_hints: Tuple[str, ...] = ("収入", "給与", "給料", "賞与", "ボーナス", "入金")
    expense_hints: Tuple[str, ...] = ("支出", "出金", "支払", "立替")
    cohabitation_payment_hints: Tuple[str, ...] = ("同棲費用",)

    rent_and_utilities_fixed: int = 40000
    shared_subcategories: Tuple[str, ...] = (
        "日用品",
        "デート（立替）",
        "外食",
        "食費",
        "普段使い（立替）",
        "旅費",
    )
    full_reimburse_subcategory: str = "立替（全額）"
    self_pay_marker: str = "自費"

    subscription_category_marker: str = "通信費"
    subscription_marker: str = "サブスク"

    uncategorized_label: str = "未分類"
    other_label: str = "その他"

    installment_items: Tuple[InstallmentItem, ...] = (
        InstallmentItem("オスカー30回分", 6865, "2026年7月27日"),
        InstallmentItem("テンピュール", 11973, "2027年6月27日"),
        InstallmentItem("コンサル費用", 20686, "2026年5月27日"),
    )

    # Feed dates carrying an offset are converted to this zone before the
    # calendar year/month is read.
    timezone: str = "Asia/Tokyo"

    @property
    def installment_default_total(self) -> int:
        return sum(item.amount for item in self.installment_items)


DEFAULT_CONFIG = LedgerConfig()
