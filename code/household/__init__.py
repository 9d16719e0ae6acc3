"""
Household cashflow engine: row classification, monthly settlement and
annual overview for the shared-living ledger.
"""

from .adjustments import AdjustmentStore, MonthAdjustments
from .charts import ChartEntry, bucketize
from .classifier import (
    ClassifiedRow,
    TransactionType,
    classify,
    classify_row,
    classify_rows,
    is_cohabitation_payment,
    is_same_month,
    is_subscription_row,
    is_target_row,
    select_period,
)
from .config import DEFAULT_CONFIG, InstallmentItem, LedgerConfig
from .feed import FeedError, fetch_rows
from .overview import available_years, build_overview, latest_period, monthly_series, overview_totals
from .summary import MonthlyReport, compute_settlement, summarize_month, summarize_period

__all__ = [
    "AdjustmentStore",
    "MonthAdjustments",
    "ChartEntry",
    "bucketize",
    "ClassifiedRow",
    "TransactionType",
    "classify",
    "classify_row",
    "classify_rows",
    "is_cohabitation_payment",
    "is_same_month",
    "is_subscription_row",
    "is_target_row",
    "select_period",
    "DEFAULT_CONFIG",
    "InstallmentItem",
    "LedgerConfig",
    "FeedError",
    "fetch_rows",
    "available_years",
    "build_overview",
    "latest_period",
    "monthly_series",
    "overview_totals",
    "MonthlyReport",
    "compute_settlement",
    "summarize_month",
    "summarize_period",
]
