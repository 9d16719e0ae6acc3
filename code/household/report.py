import pandas as pd

from .config import DEFAULT_CONFIG

DETAIL_COLUMNS = ["date", "type", "category", "subcategory", "content", "amount", "memo"]


def details_frame(rows, config=DEFAULT_CONFIG):
    """Tabulate ClassifiedRow details for display or export."""
    records = [
        {
            "date": "" if r.date_raw is None else str(r.date_raw),
            "type": r.type.label(config),
            "category": r.category,
            "subcategory": r.subcategory,
            "content": r.content,
            "amount": r.amount,
            "memo": r.memo,
        }
        for r in rows
    ]
    return pd.DataFrame(records, columns=DETAIL_COLUMNS)


def save_csv(df, path):
    df.to_csv(path, index=False)


def save_excel(tables, path):
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for name, df in tables.items():
            df.to_excel(writer, sheet_name=name[:31], index=False)
