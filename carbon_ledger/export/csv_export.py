"""CSV export of counted ledger entries.

One row per entry plus a trailing total row. The export is a read-only
consumer of the engine: it never recomputes figures of its own beyond
summing the rows it writes.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable

from carbon_ledger.models.entries import LedgerEntry

LEDGER_COLUMNS = ["scope", "category", "label", "quantity", "unit", "factor", "emissions"]

ADVANCED_COLUMNS = [
    "category_number",
    "category",
    "subcategory",
    "method",
    "quantity",
    "unit",
    "factor",
    "emissions",
    "uncertainty",
    "date",
]

TOTAL_LABEL = "TOTAL"


def ledger_rows(entries: Iterable[LedgerEntry]) -> list[dict[str, object]]:
    """Rows for ``entries`` followed by the total row."""
    rows: list[dict[str, object]] = []
    total = 0.0
    for entry in entries:
        rows.append({
            "scope": int(entry.scope),
            "category": entry.category,
            "label": entry.label,
            "quantity": entry.quantity,
            "unit": entry.unit,
            "factor": entry.factor,
            "emissions": round(entry.emissions, 3),
        })
        total += entry.emissions
    rows.append({
        "scope": TOTAL_LABEL,
        "category": "",
        "label": "",
        "quantity": "",
        "unit": "",
        "factor": "",
        "emissions": round(total, 3),
    })
    return rows


def _write(columns: list[str], rows: Iterable[dict[str, object]], delimiter: str) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=columns, delimiter=delimiter, lineterminator="\n")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def export_ledger_csv(entries: Iterable[LedgerEntry], delimiter: str = ";") -> str:
    """Serialize entries as CSV text; quoting of labels is handled by the csv module."""
    return _write(LEDGER_COLUMNS, ledger_rows(entries), delimiter)


def export_advanced_csv(entries: Iterable[LedgerEntry], delimiter: str = ";") -> str:
    """GHG-Protocol category detail of the advanced Scope-3 store."""
    rows = [
        {
            "category_number": entry.category_number or "",
            "category": entry.category,
            "subcategory": entry.subcategory,
            "method": entry.method.value if entry.method else "",
            "quantity": entry.quantity,
            "unit": entry.unit,
            "factor": entry.factor,
            "emissions": round(entry.emissions, 3),
            "uncertainty": entry.uncertainty,
            "date": entry.created_at.date().isoformat(),
        }
        for entry in entries
    ]
    return _write(ADVANCED_COLUMNS, rows, delimiter)
