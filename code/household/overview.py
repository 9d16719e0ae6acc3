"""
overview.py

Annual overview: one summarize_month() per calendar month, tabulated.

Each month reads its own stored adjustment values, so a year view reflects
exactly what the monthly view shows for the same period.

The feed is classified once per overview and then sliced by parsed date;
callers holding a classified feed can pass it in directly.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, List, Mapping, Optional, Tuple

import pandas as pd

from .classifier import ClassifiedRow, classify_rows
from .config import DEFAULT_CONFIG, LedgerConfig
from .parsing import parse_date
from .summary import summarize_period


OVERVIEW_COLUMNS = [
    "month",
    "income",
    "expense",
    "adjust",
    "ledger_net",
    "counterpart_payment",
    "counterpart_paid_actual",
    "unpaid_gap",
    "installment_deduction",
    "actual_net",
]


# ======================================================
# PERIODS
# ======================================================

def _parsed_dates(rows: Iterable[Mapping], config: LedgerConfig) -> List[pd.Timestamp]:
    out = []
    for row in rows:
        if isinstance(row, ClassifiedRow):
            ts = row.date
        elif isinstance(row, Mapping):
            ts = parse_date(row.get(config.fields.date), config.timezone)
        else:
            continue
        if ts is not None:
            out.append(ts)
    return out


def available_years(rows: Iterable[Mapping], config: LedgerConfig = DEFAULT_CONFIG) -> List[int]:
    """Distinct years present in the feed, newest first."""
    years = sorted({ts.year for ts in _parsed_dates(rows, config)}, reverse=True)
    return years or [date.today().year]


def latest_period(rows: Iterable[Mapping], config: LedgerConfig = DEFAULT_CONFIG) -> Optional[Tuple[int, int]]:
    dates = _parsed_dates(rows, config)
    if not dates:
        return None
    newest = max(dates)
    return newest.year, newest.month


# ======================================================
# ANNUAL OVERVIEW
# ======================================================

def build_overview(
    rows: Iterable[Mapping],
    year: int,
    adjustments=None,
    config: LedgerConfig = DEFAULT_CONFIG,
) -> pd.DataFrame:
    rows = classify_rows(rows, config)
    records = []
    for month in range(1, 13):
        r = summarize_period(rows, year, month, adjustments, config)
        records.append({
            "month": month,
            "income": r.ledger.income,
            "expense": r.ledger.expense,
            "adjust": r.ledger.adjust,
            "ledger_net": r.ledger.net,
            "counterpart_payment": r.billing.counterpart_payment,
            "counterpart_paid_actual": r.billing.counterpart_paid_actual,
            "unpaid_gap": r.actual.unpaid_gap,
            "installment_deduction": r.billing.installment_deduction,
            "actual_net": r.actual.net,
        })
    return pd.DataFrame(records, columns=OVERVIEW_COLUMNS)


def overview_totals(df: pd.DataFrame) -> dict:
    return {c: df[c].sum().item() for c in OVERVIEW_COLUMNS if c != "month"}


def monthly_series(df: pd.DataFrame) -> pd.DataFrame:
    out = df[["month", "ledger_net", "actual_net"]].copy()
    out.insert(0, "label", out["month"].map(lambda m: f"{m}月"))
    return out.drop(columns=["month"])
