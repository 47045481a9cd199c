"""Tests for FastAPI endpoints — entries, review, mode, KPIs, export, health."""

import threading

import pytest
from httpx import ASGITransport, AsyncClient

from carbon_ledger import main
from carbon_ledger.engine.ledger_engine import CarbonLedgerEngine
from carbon_ledger.persistence.memory import InMemoryPersistence
from carbon_ledger.streaming.events import LedgerEventType
from carbon_ledger.streaming.manager import StreamManager


@pytest.fixture
def api_engine(monkeypatch):
    """Fresh engine and stream manager behind the app singletons."""
    engine = CarbonLedgerEngine(persistence=InMemoryPersistence(), reporting_year=2030)
    monkeypatch.setattr(main, "engine", engine)
    monkeypatch.setattr(main, "stream_manager", StreamManager())
    return engine


class _ThreadRecordingPersistence(InMemoryPersistence):
    def __init__(self) -> None:
        super().__init__()
        self.save_threads: set[int] = set()

    def save(self, key, payload):
        self.save_threads.add(threading.get_ident())
        super().save(key, payload)


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=main.app), base_url="http://test")


class TestAPI:
    @pytest.mark.asyncio
    async def test_health(self, api_engine):
        async with _client() as client:
            resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    @pytest.mark.asyncio
    async def test_add_entry_and_aggregate(self, api_engine):
        async with _client() as client:
            resp = await client.post(
                "/api/entries",
                json={"scope": 1, "category": "combustibles", "subcategory": "diesel", "quantity": 100},
            )
            assert resp.status_code == 201
            assert resp.json()["emissions"] == pytest.approx(268)

            await client.post(
                "/api/entries",
                json={"scope": 2, "category": "electricite", "subcategory": "france",
                      "quantity": 1, "input_unit": "MWh"},
            )
            aggregate = (await client.get("/api/aggregate")).json()
        assert aggregate["grand_total"] == pytest.approx(325)
        assert aggregate["shares"]["2"] == pytest.approx(57 / 325 * 100)

    @pytest.mark.asyncio
    async def test_unknown_factor_is_400(self, api_engine):
        async with _client() as client:
            resp = await client.post(
                "/api/entries",
                json={"scope": 1, "category": "combustibles", "subcategory": "plutonium", "quantity": 1},
            )
        assert resp.status_code == 400
        assert resp.json()["error"] == "UnknownFactor"
        assert api_engine.entries(1) == []

    @pytest.mark.asyncio
    async def test_negative_quantity_is_400(self, api_engine):
        async with _client() as client:
            resp = await client.post(
                "/api/entries",
                json={"scope": 1, "category": "combustibles", "subcategory": "diesel", "quantity": -1},
            )
        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidQuantity"

    @pytest.mark.asyncio
    async def test_invalid_scope_is_422(self, api_engine):
        async with _client() as client:
            resp = await client.get("/api/entries/4")
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_remove_entry(self, api_engine):
        entry = api_engine.add_entry(1, "combustibles", "diesel", 10)
        async with _client() as client:
            resp = await client.delete(f"/api/entries/1/{entry.id}")
            missing = await client.delete("/api/entries/1/unknown")
        assert resp.json() == {"removed": True}
        assert missing.json() == {"removed": False}

    @pytest.mark.asyncio
    async def test_review_round_trip_in_advanced_mode(self, api_engine):
        api_engine.add_entry(3, "materiaux", "acier", 1000)
        async with _client() as client:
            await client.post(
                "/api/advanced-entries",
                json={"category_id": "waste_generated", "subcategory_id": "landfill", "quantity": 1000},
            )
            await client.put("/api/mode", json={"mode": "advanced"})
            rows = (await client.get("/api/review/3")).json()
            assert [r["origin"] for r in rows] == ["standard", "advanced"]

            rows[1]["quantity"] = 500
            rows[1]["total"] = 0
            resp = await client.put("/api/review/3", json={"entries": rows})
            aggregate = (await client.get("/api/aggregate")).json()

        assert resp.status_code == 200
        assert aggregate["scope3_total"] == pytest.approx(1460 + 240)

    @pytest.mark.asyncio
    async def test_kpis_with_profile(self, api_engine):
        api_engine.add_entry(1, "combustibles", "diesel", 1000)
        async with _client() as client:
            await client.put("/api/profile", json={"revenue": 0, "headcount": 2})
            kpis = (await client.get("/api/kpis")).json()
        assert kpis["carbon_intensity"] == 0
        assert kpis["per_employee"] == pytest.approx(1.34)

    @pytest.mark.asyncio
    async def test_export_csv(self, api_engine):
        api_engine.add_entry(1, "combustibles", "diesel", 100)
        async with _client() as client:
            resp = await client.get("/api/export.csv")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        lines = resp.text.strip().split("\n")
        assert lines[0] == "scope;category;label;quantity;unit;factor;emissions"
        assert lines[-1].startswith("TOTAL;")

    @pytest.mark.asyncio
    async def test_reset(self, api_engine):
        api_engine.add_entry(1, "combustibles", "diesel", 100)
        async with _client() as client:
            await client.post("/api/reset")
            aggregate = (await client.get("/api/aggregate")).json()
        assert aggregate["grand_total"] == 0

    @pytest.mark.asyncio
    async def test_mutation_broadcasts_totals(self, api_engine):
        async with _client() as client:
            await client.post(
                "/api/entries",
                json={"scope": 1, "category": "combustibles", "subcategory": "diesel", "quantity": 100},
            )
        events = main.stream_manager.buffered()
        assert [e.event_type for e in events] == [
            LedgerEventType.ENTRY_ADDED,
            LedgerEventType.TOTALS_UPDATED,
        ]
        assert events[-1].data["grand_total"] == pytest.approx(268)

    @pytest.mark.asyncio
    async def test_autosave_runs_off_the_event_loop(self, monkeypatch):
        store = _ThreadRecordingPersistence()
        engine = CarbonLedgerEngine(persistence=store, reporting_year=2030)
        monkeypatch.setattr(main, "engine", engine)
        monkeypatch.setattr(main, "stream_manager", StreamManager())
        async with _client() as client:
            resp = await client.post(
                "/api/entries",
                json={"scope": 1, "category": "combustibles", "subcategory": "diesel", "quantity": 100},
            )
        assert resp.status_code == 201
        assert store.save_threads
        assert threading.get_ident() not in store.save_threads

    @pytest.mark.asyncio
    async def test_catalog_categories(self, api_engine):
        async with _client() as client:
            resp = await client.get("/api/catalog/2")
            bad = await client.get("/api/catalog/4")
        assert "electricite" in resp.json()["categories"]
        assert bad.status_code == 422
