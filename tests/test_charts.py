#!/usr/bin/env python3
"""
test_charts.py

Unit tests for household.charts

Tests:
- Top-N cutoff with an "other" bucket
- No-op when entries fit under the limit
- Non-positive entries dropped
- Importing the package leaves pyplot unloaded
- Trend chart file output
"""

import unittest
import sys
import subprocess
import tempfile
import shutil
from pathlib import Path

import pandas as pd

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from household.charts import ChartEntry, bucketize, plot_monthly_trend


class TestBucketize(unittest.TestCase):

    def test_cutoff_collapses_remainder(self):
        mapping = {f"c{i}": v for i, v in enumerate([800, 700, 600, 500, 400, 300, 200, 100])}
        out = bucketize(mapping, limit=6)

        self.assertEqual(len(out), 7)
        self.assertEqual([e.name for e in out[:6]], ["c0", "c1", "c2", "c3", "c4", "c5"])
        self.assertEqual(out[6], ChartEntry("その他", 300))

    def test_under_limit_returns_all_sorted(self):
        out = bucketize({"a": 10, "b": 40, "c": 20, "d": 30})
        self.assertEqual([e.name for e in out], ["b", "d", "c", "a"])
        self.assertNotIn("その他", [e.name for e in out])

    def test_exactly_limit_has_no_other(self):
        out = bucketize({str(i): i + 1 for i in range(6)}, limit=6)
        self.assertEqual(len(out), 6)

    def test_non_positive_dropped(self):
        out = bucketize({"a": 0, "b": -5, "c": 7})
        self.assertEqual(out, [ChartEntry("c", 7)])

    def test_empty(self):
        self.assertEqual(bucketize({}), [])

    def test_custom_other_label(self):
        out = bucketize({"a": 3, "b": 2, "c": 1}, limit=1, other_label="other")
        self.assertEqual(out, [ChartEntry("a", 3), ChartEntry("other", 3)])

    def test_ties_keep_insertion_order(self):
        out = bucketize({"x": 5, "y": 5, "z": 5})
        self.assertEqual([e.name for e in out], ["x", "y", "z"])


class TestImports(unittest.TestCase):

    def test_package_import_does_not_load_pyplot(self):
        code_dir = str(Path(__file__).resolve().parents[1] / "code")
        script = (
            "import sys; sys.path.insert(0, sys.argv[1]); "
            "import household, household.charts; "
            "print('matplotlib.pyplot' in sys.modules)"
        )
        out = subprocess.run(
            [sys.executable, "-c", script, code_dir],
            capture_output=True, text=True, check=True,
        )
        self.assertEqual(out.stdout.strip(), "False")


class TestTrendChart(unittest.TestCase):

    def setUp(self):
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_writes_png(self):
        df = pd.DataFrame({
            "month": list(range(1, 13)),
            "ledger_net": [1000 * m for m in range(1, 13)],
            "actual_net": [-500 * m for m in range(1, 13)],
        })
        out = Path(self.test_dir) / "trend.png"
        plot_monthly_trend(df, out, "trend")
        self.assertTrue(out.exists())
        self.assertGreater(out.stat().st_size, 0)


if __name__ == "__main__":
    unittest.main(verbosity=2)
