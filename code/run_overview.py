#!/usr/bin/env python3
"""
run_overview.py

Fetch the ledger feed and export the annual overview.

Outputs (under LEDGER_OUTPUT_DIR):
- tables/overview_{year}.csv
- household_overview_{year}.xlsx  (Overview, Totals, and the month's details)
- charts/trend_{year}.png

Env
- LEDGER_FEED_URL (required)
- LEDGER_ADJUSTMENTS_JSON, LEDGER_OUTPUT_DIR, LEDGER_FEED_TIMEOUT (optional)
"""

from __future__ import annotations

import argparse
import sys

import pandas as pd

from household.adjustments import AdjustmentStore
from household.charts import plot_monthly_trend
from household.classifier import classify_rows
from household.feed import FeedError, fetch_rows
from household.io import ensure_dirs, load_settings
from household.overview import build_overview, latest_period, overview_totals
from household.report import details_frame, save_csv, save_excel
from household.summary import summarize_period


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Export the household annual overview.")
    p.add_argument("--year", type=int, default=None, help="Calendar year (default: year of the newest row)")
    p.add_argument("--month", type=int, default=None, help="Month for the detail sheets (default: newest month)")
    p.add_argument("--url", default=None, help="Feed URL (overrides LEDGER_FEED_URL)")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    s = load_settings(feed_url=args.url)
    ensure_dirs(s)

    print(f"[INFO] Fetching ledger feed: {s.feed_url}")
    try:
        rows = fetch_rows(s.feed_url, timeout=s.feed_timeout)
    except FeedError as e:
        print(f"[ERROR] {e}")
        return 1
    print(f"[OK] Loaded {len(rows)} rows")

    feed = classify_rows(rows)
    latest = latest_period(feed)
    if latest is None and (args.year is None or args.month is None):
        print("[ERROR] No dated rows in feed; pass --year and --month explicitly.")
        return 1
    year = args.year or latest[0]
    month = args.month or latest[1]

    store = AdjustmentStore(s.adjustments_path)
    overview = build_overview(feed, year, store)
    totals = pd.DataFrame([overview_totals(overview)])
    report = summarize_period(feed, year, month, store)

    save_csv(overview, s.tables_dir / f"overview_{year}.csv")
    save_excel(
        {
            "Overview": overview,
            "Totals": totals,
            f"Ledger_{year}-{month:02d}": details_frame(report.details.ledger),
            f"Shared_{year}-{month:02d}": details_frame(report.details.shared),
            f"Subscriptions_{year}-{month:02d}": details_frame(report.subscription.details),
        },
        s.output_dir / f"household_overview_{year}.xlsx",
    )
    plot_monthly_trend(overview, s.charts_dir / f"trend_{year}.png", f"Ledger vs actual net {year}")

    print(f"[OK] Ledger net {year}: {totals.loc[0, 'ledger_net']:,}  Actual net: {totals.loc[0, 'actual_net']:,}")
    print("Overview export complete.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
