# csv_export.py: client-side CSV for tables and the dashboard summary
from __future__ import annotations

import csv
import datetime as dt
import re
from typing import Iterable, List, Sequence, Tuple

import pandas as pd

from forms import get_path


def cell_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, dict):
        return str(value.get("name") or value.get("title") or value.get("_id") or "")
    if isinstance(value, (list, tuple, set)):
        return ", ".join(cell_text(v) for v in value if v not in (None, ""))
    return str(value)


def rows_to_csv(headers: Sequence[str], rows: Iterable[Sequence]) -> str:
    """Every cell quoted, embedded quotes doubled, rows joined with a bare newline."""
    df = pd.DataFrame([[cell_text(c) for c in row] for row in rows], columns=list(headers), dtype=object)
    text = df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    return text[:-1] if text.endswith("\n") else text


def records_to_csv(records: Iterable[dict], columns: Sequence[Tuple[str, str]]) -> str:
    headers = [h for h, _ in columns]
    rows = [[get_path(rec, path) for _, path in columns] for rec in records or []]
    return rows_to_csv(headers, rows)


def export_timestamp(now: dt.datetime | None = None) -> str:
    return (now or dt.datetime.now()).strftime("%Y-%m-%d %H-%M-%S")


def add_export_header(csv_text: str, page_name: str, user: str | None = None,
                      now: dt.datetime | None = None) -> str:
    now = now or dt.datetime.now()
    lines: List[str] = [
        "Export Information:",
        f"Page: {page_name}",
        f"Exported By: {user or 'Unknown User'}",
        f"Export Date & Time: {export_timestamp(now)}",
        f"Generated At: {now.isoformat(timespec='seconds')}",
        "",
    ]
    return "\n".join(lines) + "\n" + csv_text


def export_filename(page_name: str, user: str | None = None, now: dt.datetime | None = None,
                    extension: str = "csv") -> str:
    clean_user = re.sub(r"[^a-zA-Z0-9]", "_", user or "unknown")
    return f"{page_name}_export_{clean_user}_{export_timestamp(now)}.{extension}"
