"""
adjustments.py

Per-month manual adjustment values, persisted as a small JSON key-value file.

Two values are tracked for every (year, month):
- counterpart_advance: shared spending the counterpart reports having paid
  out of pocket (unset -> 0)
- installment_deduction: card-installment obligations not yet in the ledger
  (unset -> configured default total of the installment items)

Values are stored the way they are typed: digit-only strings. An explicitly
stored empty installment string therefore means 0, not "use the default".
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from .config import DEFAULT_CONFIG, LedgerConfig
from .parsing import parse_yen_input


@dataclass(frozen=True)
class MonthAdjustments:
    counterpart_advance: int
    installment_deduction: int


def advance_key(year: int, month: int) -> str:
    return f"counterpart_advance_{year}-{month}"


def installment_key(year: int, month: int) -> str:
    return f"installment_adjust_{year}-{month}"


def _digits(value: object) -> str:
    return "".join(ch for ch in str(value if value is not None else "") if ch.isdigit() and ch.isascii())


class AdjustmentStore:
    """
    Key-value store for the two monthly adjustment inputs.

    With path=None the store lives in memory only (useful for tests and for a
    dashboard session without persistence).
    """

    def __init__(self, path: Optional[Union[str, Path]] = None, config: LedgerConfig = DEFAULT_CONFIG):
        self.path = Path(path) if path else None
        self.config = config
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            print(f"[WARNING] Could not read adjustments from {self.path}: {e}")
            return {}
        if not isinstance(raw, dict):
            print(f"[WARNING] Ignoring adjustments file {self.path}: expected a JSON object")
            return {}
        return {str(k): str(v) for k, v in raw.items() if v is not None}

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")

    # ---------- raw access ----------
    def read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def write(self, key: str, value: object) -> str:
        cleaned = _digits(value)
        self._data[key] = cleaned
        self._save()
        return cleaned

    # ---------- month access ----------
    def get(self, year: int, month: int) -> MonthAdjustments:
        advance_raw = self.read(advance_key(year, month)) or ""
        installment_raw = self.read(installment_key(year, month))
        if installment_raw is None:
            installment_raw = str(self.config.installment_default_total)
        return MonthAdjustments(
            counterpart_advance=parse_yen_input(advance_raw),
            installment_deduction=parse_yen_input(installment_raw),
        )

    def set(
        self,
        year: int,
        month: int,
        counterpart_advance: Optional[object] = None,
        installment_deduction: Optional[object] = None,
    ) -> MonthAdjustments:
        """Store whichever values are given (None leaves a value untouched)."""
        if counterpart_advance is not None:
            self.write(advance_key(year, month), counterpart_advance)
        if installment_deduction is not None:
            self.write(installment_key(year, month), installment_deduction)
        return self.get(year, month)
