from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping

from .parsing import Number


@dataclass(frozen=True)
class ChartEntry:
    name: str
    value: Number


def bucketize(mapping: Mapping[str, Number], limit: int = 6, other_label: str = "その他") -> List[ChartEntry]:
    """
    Top `limit` positive entries by value, plus one `other_label` entry
    holding the sum of everything past the cutoff.
    """
    entries = [ChartEntry(str(name), value) for name, value in mapping.items() if value > 0]
    entries.sort(key=lambda e: e.value, reverse=True)

    if len(entries) <= limit:
        return entries

    rest = sum(e.value for e in entries[limit:])
    return entries[:limit] + [ChartEntry(other_label, rest)]


def plot_monthly_trend(df, outpath, title):
    """Line chart of ledger vs actual net per month from an overview frame."""
    import matplotlib.pyplot as plt

    ax = df.plot(x="month", y=["ledger_net", "actual_net"], kind="line", marker="o")
    ax.set_xticks(list(df["month"]))
    ax.axhline(0, color="#94a3b8", linewidth=0.8)
    plt.title(title)
    plt.tight_layout()
    plt.savefig(outpath)
    plt.close()
