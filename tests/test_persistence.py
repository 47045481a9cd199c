"""Tests for persistence adapters, codecs and load-time recovery."""

import json
from dataclasses import replace

import pytest

from carbon_ledger.engine.errors import DegradedAdvancedData, MalformedPersistedState
from carbon_ledger.engine.ledger_engine import CarbonLedgerEngine
from carbon_ledger.models.entries import ReviewEntry
from carbon_ledger.models.enums import AccountingMode, EntryOrigin, Scope
from carbon_ledger.persistence.base import (
    ADVANCED_STORE_KEY,
    LEDGER_KEYS,
    MODE_KEY,
    PROFILE_KEY,
    PersistenceAdapter,
)
from carbon_ledger.persistence.json_file import JsonFilePersistence
from carbon_ledger.persistence.memory import InMemoryPersistence
from carbon_ledger.persistence.schema import decode_advanced_store, decode_ledger, encode_ledger


class _BrokenPersistence(PersistenceAdapter):
    name = "broken"

    def load(self, key):
        raise OSError("disk on fire")

    def save(self, key, payload):
        raise OSError("disk on fire")


class TestCodecs:
    def test_persisted_emissions_are_recomputed(self, populated_engine):
        payload = json.loads(encode_ledger(Scope.SCOPE_1, populated_engine.entries(Scope.SCOPE_1)))
        payload["entries"][0]["emissions"] = 1_000_000
        entries = decode_ledger("ledger-1", json.dumps(payload), Scope.SCOPE_1)
        assert entries[0].emissions == pytest.approx(268)

    def test_invalid_json_is_malformed(self):
        with pytest.raises(MalformedPersistedState):
            decode_ledger("ledger-1", "{not json", Scope.SCOPE_1)

    def test_negative_quantity_is_malformed(self, populated_engine):
        payload = json.loads(encode_ledger(Scope.SCOPE_1, populated_engine.entries(Scope.SCOPE_1)))
        payload["entries"][0]["quantity"] = -3
        with pytest.raises(MalformedPersistedState):
            decode_ledger("ledger-1", json.dumps(payload), Scope.SCOPE_1)

    def test_scope_mismatch_is_malformed(self, populated_engine):
        payload = encode_ledger(Scope.SCOPE_1, populated_engine.entries(Scope.SCOPE_1))
        with pytest.raises(MalformedPersistedState):
            decode_ledger("ledger-2", payload, Scope.SCOPE_2)

    def test_advanced_defect_is_degraded(self):
        with pytest.raises(DegradedAdvancedData):
            decode_advanced_store(ADVANCED_STORE_KEY, "[1, 2")


class TestEngineLoad:
    def test_round_trip_through_memory(self, advanced_engine, store):
        restored = CarbonLedgerEngine(persistence=store)
        restored.load()
        assert restored.mode is AccountingMode.ADVANCED
        assert restored.get_aggregate_view() == advanced_engine.get_aggregate_view()
        assert restored.advanced_entries() == advanced_engine.advanced_entries()

    def test_absent_keys_start_empty(self):
        engine = CarbonLedgerEngine(persistence=InMemoryPersistence())
        engine.load()
        assert engine.get_aggregate_view().grand_total == 0
        assert engine.warnings == []

    def test_malformed_ledger_resets_that_store_only(self, populated_engine, store):
        store.blobs[LEDGER_KEYS[1]] = "garbage"
        restored = CarbonLedgerEngine(persistence=store)
        restored.load()
        view = restored.get_aggregate_view()
        assert view.scope1_total == 0
        assert view.scope2_total == pytest.approx(57)
        assert len(restored.warnings) == 1

    def test_malformed_mode_falls_back_to_default(self, store):
        store.blobs[MODE_KEY] = '{"mode": "quantum"}'
        engine = CarbonLedgerEngine(persistence=store, mode=AccountingMode.STANDARD)
        engine.load()
        assert engine.mode is AccountingMode.STANDARD

    def test_corrupt_advanced_store_degrades_scope3(self, advanced_engine, store):
        store.blobs[ADVANCED_STORE_KEY] = '{"scope": 3, "entries": [{"id": 1}]}'
        restored = CarbonLedgerEngine(persistence=store)
        restored.load()
        view = restored.get_aggregate_view()
        assert view.degraded_advanced_data is True
        assert view.scope3_total == pytest.approx(1460)
        assert view.grand_total == pytest.approx(268 + 57 + 1460)
        assert view.warnings

    def test_degraded_blob_not_overwritten_until_touched(self, store):
        store.blobs[ADVANCED_STORE_KEY] = "corrupt"
        engine = CarbonLedgerEngine(persistence=store)
        engine.load()
        engine.save()
        assert store.blobs[ADVANCED_STORE_KEY] == "corrupt"

        engine.add_advanced_entry("waste_generated", "landfill", 10)
        assert engine.degraded_advanced_data is False
        assert store.blobs[ADVANCED_STORE_KEY] != "corrupt"

    def test_standard_only_review_keeps_degraded_blob(self, populated_engine, store):
        populated_engine.set_mode(AccountingMode.ADVANCED)
        store.blobs[ADVANCED_STORE_KEY] = "corrupt-but-recoverable"
        restored = CarbonLedgerEngine(persistence=store)
        restored.load()

        rows = restored.list_entries_for_review(Scope.SCOPE_3)
        assert [r.origin for r in rows] == [EntryOrigin.STANDARD]
        outcome = restored.apply_reviewed_entries(Scope.SCOPE_3, [replace(rows[0], quantity=500)])

        assert outcome.advanced_rewritten is False
        assert restored.degraded_advanced_data is True
        assert restored.warnings
        assert store.blobs[ADVANCED_STORE_KEY] == "corrupt-but-recoverable"
        view = restored.get_aggregate_view()
        assert view.degraded_advanced_data is True
        assert view.scope3_total == pytest.approx(500 * 1.46)

    def test_review_with_advanced_rows_replaces_degraded_blob(self, populated_engine, store):
        populated_engine.set_mode(AccountingMode.ADVANCED)
        store.blobs[ADVANCED_STORE_KEY] = "corrupt"
        restored = CarbonLedgerEngine(persistence=store)
        restored.load()

        rows = restored.list_entries_for_review(Scope.SCOPE_3)
        rows.append(ReviewEntry(
            id="",
            label="Landfill",
            quantity=10,
            unit="kg",
            factor=0.48,
            total=0.0,
            origin=EntryOrigin.ADVANCED,
            category="waste_generated",
            subcategory="landfill",
        ))
        outcome = restored.apply_reviewed_entries(Scope.SCOPE_3, rows)

        assert outcome.advanced_rewritten is True
        assert restored.degraded_advanced_data is False
        assert len(decode_advanced_store(ADVANCED_STORE_KEY, store.blobs[ADVANCED_STORE_KEY])) == 1

    def test_overlapping_advanced_entries_dropped(self, populated_engine, store):
        steel = populated_engine.entries(Scope.SCOPE_3)[0]
        store.blobs[ADVANCED_STORE_KEY] = encode_ledger(Scope.SCOPE_3, [steel])
        restored = CarbonLedgerEngine(persistence=store)
        restored.load()
        assert restored.advanced_entries() == []
        assert restored.warnings

    def test_unreadable_persistence_never_raises(self):
        engine = CarbonLedgerEngine(persistence=_BrokenPersistence())
        engine.load()
        entry = engine.add_entry(1, "combustibles", "diesel", 1)
        assert entry.emissions == pytest.approx(2.68)
        assert engine.degraded_advanced_data is True

    def test_profile_round_trip(self, engine, store, profile):
        engine.set_profile(profile)
        restored = CarbonLedgerEngine(persistence=store)
        restored.load()
        assert restored.profile == profile
        assert PROFILE_KEY in store.blobs

    def test_autosave_disabled(self):
        store = InMemoryPersistence()
        engine = CarbonLedgerEngine(persistence=store, autosave=False)
        engine.add_entry(1, "combustibles", "diesel", 1)
        assert store.blobs == {}
        engine.save()
        assert LEDGER_KEYS[1] in store.blobs


class TestJsonFilePersistence:
    def test_round_trip_via_files(self, tmp_path, populated_engine):
        adapter = JsonFilePersistence(tmp_path / "state")
        populated_engine.persistence = adapter
        populated_engine.save()

        assert (tmp_path / "state" / "ledger-1.json").exists()
        restored = CarbonLedgerEngine(persistence=JsonFilePersistence(tmp_path / "state"))
        restored.load()
        assert restored.get_aggregate_view().grand_total == pytest.approx(268 + 57 + 1460)

    def test_absent_file_loads_none(self, tmp_path):
        assert JsonFilePersistence(tmp_path).load("ledger-1") is None

    def test_rejects_path_like_keys(self, tmp_path):
        with pytest.raises(ValueError):
            JsonFilePersistence(tmp_path).save("../escape", "{}")
