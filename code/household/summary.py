"""
summary.py

Monthly ledger summary and cohabitation cost-sharing settlement.

Input Contract
--------------
summarize_month() expects rows already restricted to one (year, month) and to
target-flagged rows (see classifier.select_period). Rows may be ClassifiedRow
values or raw feed mappings; raw mappings are classified on the fly.

Settlement
----------
The counterpart owes half of the shared-cost bucket, all of the
full-reimbursement bucket and the fixed rent + utilities baseline, minus half
of whatever they advanced themselves:

    shared_half              = floor(shared_total / 2)
    total_billing            = rent + shared_half + full_total
    my_advance_total         = rent + shared_total + full_total
    counterpart_advance_half = floor(counterpart_advance / 2)
    counterpart_payment      = total_billing - counterpart_advance_half
    ledger_net               = income - expense + adjust
    unpaid_gap               = counterpart_payment - counterpart_paid_actual
    actual_net               = ledger_net + unpaid_gap - installment_deduction
    reported_gap             = unpaid_gap - installment_deduction

compute_settlement() is the only place these formulas live; the annual
overview reuses it through summarize_month().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .classifier import ClassifiedRow, TransactionType, classify_row, select_period
from .config import DEFAULT_CONFIG, LedgerConfig
from .parsing import Number


# ======================================================
# REPORT STRUCTURES
# ======================================================

@dataclass(frozen=True)
class LedgerTotals:
    income: Number
    expense: Number
    adjust: Number
    net: Number


@dataclass(frozen=True)
class BillingSummary:
    rent: int
    shared: Number
    shared_half: int
    full: Number
    counterpart_advance: Number
    counterpart_advance_half: int


@dataclass(frozen=True)
class Billing:
    total_billing: Number
    my_advance_total: Number
    counterpart_payment: Number
    counterpart_paid_actual: Number
    installment_deduction: Number
    summary: BillingSummary


@dataclass(frozen=True)
class ActualNet:
    unpaid_gap: Number
    net: Number
    gap: Number


@dataclass(frozen=True)
class Details:
    ledger: Tuple[ClassifiedRow, ...]
    shared: Tuple[ClassifiedRow, ...]


@dataclass(frozen=True)
class Subscription:
    total: Number
    details: Tuple[ClassifiedRow, ...]


@dataclass(frozen=True)
class MonthlyReport:
    ledger: LedgerTotals
    billing: Billing
    actual: ActualNet
    expense_by_subcategory: Dict[str, Number]
    details: Details
    subscription: Subscription

    @property
    def has_rows(self) -> bool:
        return len(self.details.ledger) > 0


@dataclass(frozen=True)
class Settlement:
    shared_half: int
    total_billing: Number
    my_advance_total: Number
    counterpart_advance_half: int
    counterpart_payment: Number
    ledger_net: Number
    unpaid_gap: Number
    actual_net: Number
    reported_gap: Number


# ======================================================
# FORMULAS
# ======================================================

def floor_half(value: Number) -> int:
    """floor(value / 2), rounding toward negative infinity for any sign."""
    return int(value // 2)


def compute_settlement(
    income: Number,
    expense: Number,
    adjust: Number,
    shared_total: Number,
    full_total: Number,
    counterpart_advance: Number,
    counterpart_paid_actual: Number,
    installment_deduction: Number,
    rent: int,
) -> Settlement:
    shared_half = floor_half(shared_total)
    total_billing = rent + shared_half + full_total
    my_advance_total = rent + shared_total + full_total
    advance_half = floor_half(counterpart_advance)
    counterpart_payment = total_billing - advance_half
    ledger_net = income - expense + adjust
    unpaid_gap = counterpart_payment - counterpart_paid_actual
    actual_net = ledger_net + unpaid_gap - installment_deduction

    return Settlement(
        shared_half=shared_half,
        total_billing=total_billing,
        my_advance_total=my_advance_total,
        counterpart_advance_half=advance_half,
        counterpart_payment=counterpart_payment,
        ledger_net=ledger_net,
        unpaid_gap=unpaid_gap,
        actual_net=actual_net,
        reported_gap=unpaid_gap - installment_deduction,
    )


def sort_newest_first(rows: Iterable[ClassifiedRow]) -> Tuple[ClassifiedRow, ...]:
    """
    Date-descending, stable on ties. Rows whose date did not parse keep their
    encounter order after every dated row.
    """
    rows = list(rows)
    dated = sorted((r for r in rows if r.date is not None), key=lambda r: r.date, reverse=True)
    undated = [r for r in rows if r.date is None]
    return tuple(dated + undated)


# ======================================================
# MONTHLY SUMMARY
# ======================================================

def _ensure_classified(row: Union[ClassifiedRow, Mapping], config: LedgerConfig) -> ClassifiedRow:
    if isinstance(row, ClassifiedRow):
        return row
    return classify_row(row, config)


def summarize_month(
    rows: Iterable[Union[ClassifiedRow, Mapping]],
    counterpart_advance: Number = 0,
    installment_deduction: Optional[Number] = None,
    config: LedgerConfig = DEFAULT_CONFIG,
) -> MonthlyReport:
    if installment_deduction is None:
        installment_deduction = config.installment_default_total

    income_total = 0
    expense_total = 0
    adjust_total = 0
    shared_total = 0
    full_total = 0
    paid_actual = 0
    subscription_total = 0

    ledger_details: List[ClassifiedRow] = []
    shared_details: List[ClassifiedRow] = []
    full_details: List[ClassifiedRow] = []
    subscription_details: List[ClassifiedRow] = []
    by_subcategory: Dict[str, Number] = {}

    for raw in rows:
        row = _ensure_classified(raw, config)
        ledger_details.append(row)

        if row.type is TransactionType.INCOME:
            income_total += row.amount_abs
            if row.is_cohabitation_payment:
                paid_actual += row.amount_abs
        elif row.type is TransactionType.ADJUSTMENT:
            adjust_total += row.amount
        else:
            expense_total += row.amount_abs

            key = row.subcategory or row.category or config.uncategorized_label
            by_subcategory[key] = by_subcategory.get(key, 0) + row.amount_abs

            if row.is_subscription:
                subscription_total += row.amount_abs
                subscription_details.append(row)

            if config.self_pay_marker not in row.subcategory:
                if row.subcategory == config.full_reimburse_subcategory:
                    full_total += row.amount_abs
                    full_details.append(row)
                elif row.subcategory in config.shared_subcategories:
                    shared_total += row.amount_abs
                    shared_details.append(row)

    s = compute_settlement(
        income=income_total,
        expense=expense_total,
        adjust=adjust_total,
        shared_total=shared_total,
        full_total=full_total,
        counterpart_advance=counterpart_advance,
        counterpart_paid_actual=paid_actual,
        installment_deduction=installment_deduction,
        rent=config.rent_and_utilities_fixed,
    )

    return MonthlyReport(
        ledger=LedgerTotals(
            income=income_total,
            expense=expense_total,
            adjust=adjust_total,
            net=s.ledger_net,
        ),
        billing=Billing(
            total_billing=s.total_billing,
            my_advance_total=s.my_advance_total,
            counterpart_payment=s.counterpart_payment,
            counterpart_paid_actual=paid_actual,
            installment_deduction=installment_deduction,
            summary=BillingSummary(
                rent=config.rent_and_utilities_fixed,
                shared=shared_total,
                shared_half=s.shared_half,
                full=full_total,
                counterpart_advance=counterpart_advance,
                counterpart_advance_half=s.counterpart_advance_half,
            ),
        ),
        actual=ActualNet(unpaid_gap=s.unpaid_gap, net=s.actual_net, gap=s.reported_gap),
        expense_by_subcategory=by_subcategory,
        details=Details(
            ledger=sort_newest_first(ledger_details),
            shared=sort_newest_first(shared_details + full_details),
        ),
        subscription=Subscription(
            total=subscription_total,
            details=sort_newest_first(subscription_details),
        ),
    )


def summarize_period(
    rows: Iterable[Mapping],
    year: int,
    month: int,
    adjustments=None,
    config: LedgerConfig = DEFAULT_CONFIG,
) -> MonthlyReport:
    """
    Filter the feed to (year, month) and summarize it. Rows may be raw
    mappings or an already classified feed (see classify_rows).

    `adjustments` is any object with get(year, month) returning an object with
    counterpart_advance and installment_deduction (see AdjustmentStore). When
    omitted, the advance is 0 and the installment deduction is the configured
    default.
    """
    if adjustments is None:
        advance, installment = 0, config.installment_default_total
    else:
        values = adjustments.get(year, month)
        advance, installment = values.counterpart_advance, values.installment_deduction

    period_rows = select_period(rows, year, month, config)
    return summarize_month(period_rows, advance, installment, config)
