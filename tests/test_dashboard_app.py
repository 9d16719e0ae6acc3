#!/usr/bin/env python3
"""
test_dashboard_app.py

Unit tests for the dashboard layer.

Tests:
- dashboard_app imports and builds with data, without data, and with a feed error
- Yen formatting helpers
- Breakdown rows and detail records reflect the monthly report
- Adjustment inputs: only edits are persisted, the selected month uses live values
"""

import unittest
import sys
from pathlib import Path

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))


ROWS = [
    {"日付": "2025-06-01", "金額（円）": 300000, "区分": "収入", "計算対象": "1"},
    {"日付": "2025-06-05", "金額（円）": 40000, "区分": "支出", "中項目": "日用品", "計算対象": "1"},
    {"日付": "2025-06-10", "金額（円）": 20000, "区分": "支出", "中項目": "立替（全額）", "計算対象": "1"},
    {"日付": "2025-06-11", "金額（円）": -500, "区分": "調整", "計算対象": "1"},
]


class TestDashboardApp(unittest.TestCase):

    def test_dashboard_imports(self):
        try:
            import dashboard_app
            self.assertTrue(hasattr(dashboard_app, "build_app"))
            self.assertTrue(hasattr(dashboard_app, "main"))
        except Exception as e:
            self.fail(f"Failed to import dashboard_app: {e}")

    def test_build_app_with_rows(self):
        from dashboard_app import build_app
        from household.adjustments import AdjustmentStore

        app = build_app(ROWS, AdjustmentStore(), loader=lambda: ROWS)
        self.assertIsNotNone(app)
        self.assertTrue(hasattr(app, "layout"))

    def test_build_app_without_rows(self):
        from dashboard_app import build_app
        from household.adjustments import AdjustmentStore

        app = build_app([], AdjustmentStore(), feed_error="Feed request failed")
        self.assertIsNotNone(app.layout)


class TestFormatting(unittest.TestCase):

    def test_format_yen(self):
        from dashboard_app import format_yen
        self.assertEqual(format_yen(1234567), "¥1,234,567")
        self.assertEqual(format_yen(-500), "¥500")

    def test_format_signed_yen(self):
        from dashboard_app import format_signed_yen
        self.assertEqual(format_signed_yen(1000), "+¥1,000")
        self.assertEqual(format_signed_yen(-1000), "-¥1,000")
        self.assertEqual(format_signed_yen(0), "¥0")

    def test_format_deduction(self):
        from dashboard_app import format_deduction
        self.assertEqual(format_deduction(39524), "-¥39,524")
        self.assertEqual(format_deduction(0), "¥0")

    def test_format_ledger_amount(self):
        from dashboard_app import format_ledger_amount
        from household.classifier import TransactionType
        self.assertEqual(format_ledger_amount(TransactionType.INCOME, 300), "+¥300")
        self.assertEqual(format_ledger_amount(TransactionType.EXPENSE, -300), "-¥300")
        self.assertEqual(format_ledger_amount(TransactionType.ADJUSTMENT, -300), "-¥300")


class TestReportViews(unittest.TestCase):

    def setUp(self):
        from household.summary import summarize_period
        self.report = summarize_period(ROWS, 2025, 6)

    def test_ledger_breakdown(self):
        from dashboard_app import ledger_breakdown_rows
        rows = {label: value for label, value, _ in ledger_breakdown_rows(self.report)}
        self.assertEqual(rows["収入合計"], "¥300,000")
        self.assertEqual(rows["支出合計"], "¥60,000")
        self.assertEqual(rows["調整"], "-¥500")
        self.assertEqual(rows["帳簿上収支"], "+¥239,500")

    def test_billing_breakdown(self):
        from dashboard_app import billing_breakdown_rows
        rows = {label: value for label, value, _ in billing_breakdown_rows(self.report)}
        self.assertEqual(rows["請求合計"], "¥80,000")
        self.assertEqual(rows["相手の支払額"], "¥80,000")
        self.assertEqual(rows["分割払い控除"], "-¥39,524")

    def test_details_records(self):
        from dashboard_app import details_records
        records = details_records(self.report.details.ledger)
        self.assertEqual([r["date"] for r in records], ["2025-06-11", "2025-06-10", "2025-06-05", "2025-06-01"])
        self.assertEqual(records[0]["type"], "調整")
        self.assertEqual(records[0]["amount"], "-¥500")
        self.assertEqual(records[3]["amount"], "+¥300,000")


class TestAdjustmentInputs(unittest.TestCase):
    """Persisting the two monthly inputs and applying them to the views."""

    def setUp(self):
        from household.adjustments import AdjustmentStore
        self.store = AdjustmentStore()

    def test_loading_unset_month_writes_nothing(self):
        from dashboard_app import persist_month_adjustments
        from household.adjustments import advance_key, installment_key

        # What the load callback puts in the inputs for an unset month
        written = persist_month_adjustments(self.store, 2025, 6, "", "39524")

        self.assertEqual(written, [])
        self.assertIsNone(self.store.read(advance_key(2025, 6)))
        self.assertIsNone(self.store.read(installment_key(2025, 6)))

    def test_edited_values_are_stored(self):
        from dashboard_app import persist_month_adjustments
        from household.adjustments import advance_key, installment_key

        written = persist_month_adjustments(self.store, 2025, 6, "12,000", "0")

        self.assertEqual(written, [advance_key(2025, 6), installment_key(2025, 6)])
        self.assertEqual(self.store.get(2025, 6).counterpart_advance, 12000)
        self.assertEqual(self.store.get(2025, 6).installment_deduction, 0)
        self.assertEqual(persist_month_adjustments(self.store, 2025, 6, "12000", "0"), [])

    def test_selected_month_uses_typed_values(self):
        from dashboard_app import build_month_views
        from household.classifier import classify_rows

        rows = ROWS + [{"日付": "2025-05-02", "金額（円）": 1000, "区分": "支出", "計算対象": "1"}]
        self.store.set(2025, 5, counterpart_advance="4000", installment_deduction="500")

        report, overview = build_month_views(classify_rows(rows), self.store, 2025, 6, "10,000", "1000")

        self.assertEqual(report.billing.summary.counterpart_advance, 10000)
        self.assertEqual(report.billing.installment_deduction, 1000)
        june = overview[overview["month"] == 6].iloc[0]
        self.assertEqual(june["installment_deduction"], 1000)
        self.assertEqual(june["counterpart_payment"], 80000 - 5000)
        may = overview[overview["month"] == 5].iloc[0]
        self.assertEqual(may["installment_deduction"], 500)
        self.assertEqual(may["counterpart_payment"], 40000 - 2000)
        july = overview[overview["month"] == 7].iloc[0]
        self.assertEqual(july["installment_deduction"], 39524)
        # Typed values are not persisted by the views
        self.assertEqual(self.store.get(2025, 6).counterpart_advance, 0)

    def test_missing_installment_input_falls_back_to_store(self):
        from dashboard_app import selected_month_adjustments

        self.store.set(2025, 6, installment_deduction="2500")
        view = selected_month_adjustments(self.store, 2025, 6, None, None)
        self.assertEqual(view.get(2025, 6).installment_deduction, 2500)
        self.assertEqual(view.get(2025, 6).counterpart_advance, 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
