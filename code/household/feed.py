"""
feed.py

Fetch transaction rows from the spreadsheet web app.

The Apps Script endpoint returns the ledger sheet as a JSON array of objects
keyed by the sheet's header labels. Anything else is a feed failure.
"""

from __future__ import annotations

from typing import List

import requests


class FeedError(Exception):
    """Raised when the ledger feed cannot be fetched or is malformed."""
    pass


def fetch_rows(url: str, timeout: float = 30) -> List[dict]:
    if not url or not url.strip():
        raise FeedError("Feed URL is empty")

    headers = {"Cache-Control": "no-store", "User-Agent": "household-cashflow-dashboard"}
    try:
        r = requests.get(url.strip(), headers=headers, timeout=timeout)
        r.raise_for_status()
    except requests.RequestException as e:
        raise FeedError(f"Feed request failed: {e}") from e

    try:
        data = r.json()
    except ValueError as e:
        raise FeedError(f"Feed did not return JSON: {e}") from e

    if not isinstance(data, list):
        raise FeedError(f"Unexpected feed payload: expected a JSON array, got {type(data).__name__}")

    return [row for row in data if isinstance(row, dict)]
