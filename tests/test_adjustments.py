#!/usr/bin/env python3
"""
test_adjustments.py

Unit tests for household.adjustments

Tests:
- Defaults for unset months
- Digit-only storage and explicit empty values
- JSON persistence round trip across store instances
- Corrupt file handling
"""

import json
import unittest
import sys
import tempfile
import shutil
from pathlib import Path

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from household.adjustments import AdjustmentStore, MonthAdjustments, advance_key, installment_key
from household.config import InstallmentItem, LedgerConfig


class TestAdjustmentStore(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.path = Path(self.test_dir) / "state" / "adjustments.json"

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_defaults(self):
        store = AdjustmentStore()
        self.assertEqual(store.get(2025, 6), MonthAdjustments(0, 39524))

    def test_default_follows_config(self):
        cfg = LedgerConfig(installment_items=(InstallmentItem("ローン", 1234, "2030年1月1日"),))
        self.assertEqual(AdjustmentStore(config=cfg).get(2025, 6).installment_deduction, 1234)

    def test_set_cleans_input(self):
        store = AdjustmentStore()
        result = store.set(2025, 6, counterpart_advance="¥12,000", installment_deduction=" 5 000 ")
        self.assertEqual(result, MonthAdjustments(12000, 5000))
        self.assertEqual(store.read(advance_key(2025, 6)), "12000")

    def test_explicit_empty_installment_is_zero(self):
        store = AdjustmentStore()
        store.set(2025, 6, installment_deduction="")
        self.assertEqual(store.get(2025, 6).installment_deduction, 0)

    def test_months_are_independent(self):
        store = AdjustmentStore()
        store.set(2025, 6, counterpart_advance=3000)
        self.assertEqual(store.get(2025, 7).counterpart_advance, 0)

    def test_persists_to_json(self):
        store = AdjustmentStore(self.path)
        store.set(2025, 6, counterpart_advance="3000", installment_deduction="100")

        self.assertTrue(self.path.exists())
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(raw[advance_key(2025, 6)], "3000")
        self.assertEqual(raw[installment_key(2025, 6)], "100")

        reloaded = AdjustmentStore(self.path)
        self.assertEqual(reloaded.get(2025, 6), MonthAdjustments(3000, 100))

    def test_corrupt_file_treated_as_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        store = AdjustmentStore(self.path)
        self.assertEqual(store.get(2025, 6), MonthAdjustments(0, 39524))

    def test_non_object_file_treated_as_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[1, 2]", encoding="utf-8")
        self.assertEqual(AdjustmentStore(self.path).get(2025, 6).counterpart_advance, 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
