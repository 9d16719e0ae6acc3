"""
parsing.py

Best-effort parsing helpers shared by the classifier and summarizer.

None of these raise: malformed values collapse to a neutral default
(0 for amounts, None for dates, "" for text).
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd


Number = Union[int, float]

_WS_RE = re.compile(r"[\s　]+")
_NON_DIGIT_RE = re.compile(r"[^0-9]")
_DIGIT_RE = re.compile(r"[0-9]")


def _as_number(value: float) -> Number:
    if not math.isfinite(value):
        return 0
    return int(value) if float(value).is_integer() else float(value)


def parse_amount(value: object) -> Number:
    """Parse a feed amount such as "12,345" or -300. Garbage becomes 0."""
    if value is None:
        return 0
    if isinstance(value, (bool, np.bool_)):
        return 0
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        return _as_number(float(value))

    cleaned = str(value).replace(",", "").strip()
    if not cleaned:
        return 0
    try:
        return _as_number(float(cleaned))
    except ValueError:
        return 0


def parse_yen_input(value: object) -> int:
    """Digits-only parse for manually entered yen values ("¥1,200" -> 1200)."""
    cleaned = _NON_DIGIT_RE.sub("", str(value or ""))
    return int(cleaned) if cleaned else 0


def normalize_text(value: object) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return _WS_RE.sub("", str(value)).strip()


def clean_text(value: object) -> str:
    """Trim a free-text field, mapping missing values to ""."""
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    return str(value).strip()


def build_hint_source(*values: object) -> str:
    return " ".join(v for v in (normalize_text(x) for x in values) if v)


def has_hint(text: str, hints: Iterable[str]) -> bool:
    return any(hint in text for hint in hints)


def parse_date(value: object, timezone: str = "Asia/Tokyo") -> Optional[pd.Timestamp]:
    """
    Parse a feed date into a naive local Timestamp.

    Returns None for blanks and anything pandas cannot read. Offset-aware
    values (e.g. "2025-06-01T15:00:00.000Z") are converted to `timezone`
    first so the calendar month matches what the household sees.

    Strings without a digit are rejected up front: pandas reads "now" and
    "today" as the current clock time.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (datetime, date, pd.Timestamp)):
        raw = value
    else:
        raw = str(value).strip()
        if not _DIGIT_RE.search(raw):
            return None

    ts = pd.to_datetime(raw, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(timezone).tz_localize(None)
    return ts
