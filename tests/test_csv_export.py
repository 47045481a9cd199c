"""Tests for the CSV export contract."""

import csv
import io
from dataclasses import replace

import pytest

from carbon_ledger.export.csv_export import (
    ADVANCED_COLUMNS,
    LEDGER_COLUMNS,
    export_advanced_csv,
    export_ledger_csv,
)


def _parse(text: str) -> list[dict]:
    return list(csv.DictReader(io.StringIO(text), delimiter=";"))


class TestLedgerExport:
    def test_header_and_rows(self, populated_engine):
        rows = _parse(export_ledger_csv(populated_engine.counted_entries()))
        assert list(rows[0].keys()) == LEDGER_COLUMNS
        assert len(rows) == 4
        assert rows[0]["scope"] == "1"
        assert rows[0]["label"] == "Gazole/Diesel"

    def test_trailing_total_matches_grand_total(self, advanced_engine):
        rows = _parse(export_ledger_csv(advanced_engine.counted_entries()))
        total = rows[-1]
        assert total["scope"] == "TOTAL"
        assert float(total["emissions"]) == pytest.approx(advanced_engine.get_aggregate_view().grand_total)

    def test_empty_export_has_zero_total(self):
        rows = _parse(export_ledger_csv([]))
        assert len(rows) == 1
        assert float(rows[0]["emissions"]) == 0

    def test_labels_with_delimiter_are_quoted(self, engine):
        engine.add_entry(3, "materiaux", "acier", 1)
        rows = engine.list_entries_for_review(3)
        engine.apply_reviewed_entries(3, [replace(rows[0], label="Acier; galvanisé")])
        parsed = _parse(export_ledger_csv(engine.counted_entries()))
        assert parsed[0]["label"] == "Acier; galvanisé"


class TestAdvancedExport:
    def test_columns(self, advanced_engine):
        rows = _parse(export_advanced_csv(advanced_engine.advanced_entries()))
        assert list(rows[0].keys()) == ADVANCED_COLUMNS
        assert rows[0]["category_number"] == "1"
        assert rows[0]["method"] == "actual"
        assert rows[1]["uncertainty"] == "25"
