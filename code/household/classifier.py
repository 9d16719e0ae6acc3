"""
classifier.py

Deterministic, explainable row classifier for the household ledger feed.

Resolution order:
1) Explicit kind tag (区分) equal to a canonical type label always wins.
2) Keyword hints over kind + major + minor + content, checked
   adjust -> income -> expense.
3) Anything else is an expense.

Classification is total: every row, including empty mappings and rows with
non-string values, resolves to exactly one TransactionType.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Union

import pandas as pd

from .config import DEFAULT_CONFIG, LedgerConfig
from .parsing import (
    Number,
    build_hint_source,
    clean_text,
    has_hint,
    normalize_text,
    parse_amount,
    parse_date,
)


class TransactionType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    ADJUSTMENT = "ADJUSTMENT"

    def label(self, config: LedgerConfig = DEFAULT_CONFIG) -> str:
        """Display label used in the feed for this type."""
        return {
            TransactionType.INCOME: config.type_income,
            TransactionType.EXPENSE: config.type_expense,
            TransactionType.ADJUSTMENT: config.type_adjust,
        }[self]


# English names are accepted as explicit tags too (exact spelling only).
_ENGLISH_LABELS = {
    "Income": TransactionType.INCOME,
    "Expense": TransactionType.EXPENSE,
    "Adjustment": TransactionType.ADJUSTMENT,
}


def _as_mapping(row: object) -> Mapping:
    return row if isinstance(row, Mapping) else {}


def _explicit_type(raw: str, config: LedgerConfig) -> Optional[TransactionType]:
    if raw == config.type_income:
        return TransactionType.INCOME
    if raw == config.type_expense:
        return TransactionType.EXPENSE
    if raw == config.type_adjust:
        return TransactionType.ADJUSTMENT
    return _ENGLISH_LABELS.get(raw)


# ======================================================
# CLASSIFIER
# ======================================================

def classify(row: Mapping, config: LedgerConfig = DEFAULT_CONFIG) -> TransactionType:
    row = _as_mapping(row)
    f = config.fields
    raw = normalize_text(row.get(f.kind))

    explicit = _explicit_type(raw, config)
    if explicit is not None:
        return explicit

    hint_source = build_hint_source(raw, row.get(f.category), row.get(f.subcategory), row.get(f.content))

    if has_hint(hint_source, config.adjust_hints):
        return TransactionType.ADJUSTMENT
    if has_hint(hint_source, config.income_hints):
        return TransactionType.INCOME
    if has_hint(hint_source, config.expense_hints):
        return TransactionType.EXPENSE
    return TransactionType.EXPENSE


# ======================================================
# ROW PREDICATES
# ======================================================

def is_target_row(row: Mapping, config: LedgerConfig = DEFAULT_CONFIG) -> bool:
    row = _as_mapping(row)
    value = row.get(config.fields.target)
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip() == "1"


def is_same_month(row: Mapping, year: int, month: int, config: LedgerConfig = DEFAULT_CONFIG) -> bool:
    row = _as_mapping(row)
    ts = parse_date(row.get(config.fields.date), config.timezone)
    if ts is None:
        return False
    return ts.year == year and ts.month == month


def is_subscription_row(row: Mapping, ttype: TransactionType, config: LedgerConfig = DEFAULT_CONFIG) -> bool:
    if ttype is not TransactionType.EXPENSE:
        return False
    row = _as_mapping(row)
    f = config.fields
    major = normalize_text(row.get(f.category))
    sub = normalize_text(row.get(f.subcategory))
    content = normalize_text(row.get(f.content))
    marker = config.subscription_marker
    return config.subscription_category_marker in major and (marker in sub or marker in content)


def is_cohabitation_payment(row: Mapping, config: LedgerConfig = DEFAULT_CONFIG) -> bool:
    row = _as_mapping(row)
    f = config.fields
    hint_source = build_hint_source(row.get(f.category), row.get(f.subcategory), row.get(f.content))
    return has_hint(hint_source, config.cohabitation_payment_hints)


# ======================================================
# CLASSIFIED ROW
# ======================================================

@dataclass(frozen=True)
class ClassifiedRow:
    source: Mapping
    type: TransactionType
    amount: Number
    amount_abs: Number
    date: Optional[pd.Timestamp]
    date_raw: object
    category: str
    subcategory: str
    content: str
    memo: str
    is_subscription: bool
    is_cohabitation_payment: bool
    is_target: bool = False

    def in_month(self, year: int, month: int) -> bool:
        return self.date is not None and self.date.year == year and self.date.month == month


def classify_row(row: Mapping, config: LedgerConfig = DEFAULT_CONFIG) -> ClassifiedRow:
    row = _as_mapping(row)
    f = config.fields
    ttype = classify(row, config)
    amount = parse_amount(row.get(f.amount))
    return ClassifiedRow(
        source=row,
        type=ttype,
        amount=amount,
        amount_abs=abs(amount),
        date=parse_date(row.get(f.date), config.timezone),
        date_raw=row.get(f.date),
        category=clean_text(row.get(f.category)),
        subcategory=clean_text(row.get(f.subcategory)),
        content=clean_text(row.get(f.content)),
        memo=clean_text(row.get(f.memo)),
        is_subscription=is_subscription_row(row, ttype, config),
        is_cohabitation_payment=is_cohabitation_payment(row, config),
        is_target=is_target_row(row, config),
    )


def classify_rows(rows: Iterable[Mapping], config: LedgerConfig = DEFAULT_CONFIG) -> List[ClassifiedRow]:
    """Classify a feed once. Rows that are already ClassifiedRow pass through."""
    return [r if isinstance(r, ClassifiedRow) else classify_row(r, config) for r in rows]


def select_period(
    rows: Iterable[Union[ClassifiedRow, Mapping]],
    year: int,
    month: int,
    config: LedgerConfig = DEFAULT_CONFIG,
) -> List[Union[ClassifiedRow, Mapping]]:
    """
    Target-flagged rows dated in (year, month), in feed order.

    ClassifiedRow values are filtered on their parsed date and target flag,
    so a feed classified once can be sliced into months without re-parsing.
    """
    out = []
    for r in rows:
        if isinstance(r, ClassifiedRow):
            if r.is_target and r.in_month(year, month):
                out.append(r)
        elif is_target_row(r, config) and is_same_month(r, year, month, config):
            out.append(r)
    return out
