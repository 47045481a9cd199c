"""FastAPI application for the carbon ledger — REST endpoints and SSE streaming."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from typing import Optional

from fastapi import FastAPI, Path, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import BaseModel, Field

from carbon_ledger.config.settings import Settings
from carbon_ledger.engine.errors import InvalidQuantity, UnknownFactor, UnsupportedUnit
from carbon_ledger.engine.ledger_engine import CarbonLedgerEngine
from carbon_ledger.export.csv_export import export_advanced_csv, export_ledger_csv
from carbon_ledger.factor_library.registry import categories_for_scope
from carbon_ledger.models.entries import ActivityInput, LedgerEntry, ReviewEntry
from carbon_ledger.models.enums import AccountingMode, CalculationMethod, EntryOrigin, Scope
from carbon_ledger.persistence.schema import CompanyProfileSchema, LedgerEntrySchema
from carbon_ledger.streaming.events import LedgerEventType
from carbon_ledger.streaming.manager import DEFAULT_CHANNEL, StreamManager

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

settings = Settings()

app = FastAPI(title="Carbon Ledger API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Singletons
stream_manager = StreamManager()
engine = CarbonLedgerEngine.from_settings(settings)
_mutation_lock = asyncio.Lock()


class AddEntryRequest(BaseModel):
    scope: int = Field(ge=1, le=3)
    category: str
    subcategory: str
    quantity: float
    input_unit: Optional[str] = Field(
        default=None,
        description="Unit the quantity was entered in; omitted means already in the factor's unit",
    )


class AddAdvancedEntryRequest(BaseModel):
    category_id: str
    subcategory_id: str
    quantity: float
    method: Optional[CalculationMethod] = None
    input_unit: Optional[str] = None


class ReviewRow(BaseModel):
    id: str = ""
    label: str
    quantity: float
    unit: str
    factor: float
    total: float = 0.0
    origin: EntryOrigin = EntryOrigin.STANDARD
    category: str = ""
    subcategory: str = ""

    def to_review_entry(self) -> ReviewEntry:
        return ReviewEntry(**self.model_dump())


class ApplyReviewRequest(BaseModel):
    entries: list[ReviewRow]


class SetModeRequest(BaseModel):
    mode: AccountingMode


def _entry_json(entry: LedgerEntry) -> dict:
    return LedgerEntrySchema.from_entry(entry).model_dump(mode="json")


async def _mutate(operation, *args, **kwargs):
    """Run an engine mutation in a worker thread, one at a time.

    Mutations autosave through the persistence adapter, which may block on
    file I/O.
    """
    async with _mutation_lock:
        return await run_in_threadpool(operation, *args, **kwargs)


async def _broadcast(event_type: LedgerEventType, data: dict) -> None:
    """Emit the mutation event followed by the refreshed totals."""
    await stream_manager.publish(event_type, data)
    await stream_manager.publish(LedgerEventType.TOTALS_UPDATED, engine.get_aggregate_view().to_dict())


@app.exception_handler(UnknownFactor)
@app.exception_handler(UnsupportedUnit)
@app.exception_handler(InvalidQuantity)
async def rejected_operation(request: Request, exc: Exception):
    """Rejected adds: nothing was recorded."""
    return JSONResponse(status_code=400, content={"error": type(exc).__name__, "detail": str(exc)})


@app.exception_handler(ValueError)
async def invalid_request(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"error": "ValueError", "detail": str(exc)})


# -- Entries -----------------------------------------------------------------


@app.post("/api/entries", status_code=201)
async def add_entry(body: AddEntryRequest):
    """Record an activity in a standard ledger."""
    if body.input_unit:
        entry = await _mutate(engine.record_activity, ActivityInput(
            scope=Scope(body.scope),
            category=body.category,
            subcategory=body.subcategory,
            raw_quantity=body.quantity,
            input_unit=body.input_unit,
        ))
    else:
        entry = await _mutate(engine.add_entry, Scope(body.scope), body.category, body.subcategory, body.quantity)
    payload = _entry_json(entry)
    await _broadcast(LedgerEventType.ENTRY_ADDED, payload)
    return payload


@app.get("/api/entries/{scope}")
async def list_entries(scope: int = Path(ge=1, le=3)):
    return [_entry_json(e) for e in engine.entries(Scope(scope))]


@app.delete("/api/entries/{scope}/{entry_id}")
async def remove_entry(entry_id: str, scope: int = Path(ge=1, le=3)):
    removed = await _mutate(engine.remove_entry, Scope(scope), entry_id)
    if removed is not None:
        await _broadcast(LedgerEventType.ENTRY_REMOVED, {"scope": scope, "id": entry_id})
    return {"removed": removed is not None}


@app.delete("/api/entries/{scope}")
async def clear_scope(scope: int = Path(ge=1, le=3)):
    await _mutate(engine.clear, Scope(scope))
    await _broadcast(LedgerEventType.SCOPE_CLEARED, {"scope": scope})
    return {"status": "cleared", "scope": scope}


@app.post("/api/advanced-entries", status_code=201)
async def add_advanced_entry(body: AddAdvancedEntryRequest):
    """Record a GHG-Protocol category entry in the advanced Scope-3 store."""
    entry = await _mutate(
        engine.add_advanced_entry,
        body.category_id,
        body.subcategory_id,
        body.quantity,
        method=body.method,
        input_unit=body.input_unit,
    )
    payload = _entry_json(entry)
    await _broadcast(LedgerEventType.ENTRY_ADDED, {**payload, "origin": EntryOrigin.ADVANCED.value})
    return payload


@app.get("/api/advanced-entries")
async def list_advanced_entries():
    return [_entry_json(e) for e in engine.advanced_entries()]


@app.delete("/api/advanced-entries/{entry_id}")
async def remove_advanced_entry(entry_id: str):
    removed = await _mutate(engine.remove_advanced_entry, entry_id)
    if removed is not None:
        await _broadcast(LedgerEventType.ENTRY_REMOVED, {"scope": 3, "id": entry_id, "origin": "advanced"})
    return {"removed": removed is not None}


# -- Review surface and mode -------------------------------------------------


@app.get("/api/review/{scope}")
async def list_for_review(scope: int = Path(ge=1, le=3)):
    return [asdict(row) for row in engine.list_entries_for_review(Scope(scope))]


@app.put("/api/review/{scope}")
async def apply_review(body: ApplyReviewRequest, scope: int = Path(ge=1, le=3)):
    """Commit edits from the review surface back to the owning stores."""
    rows = [row.to_review_entry() for row in body.entries]
    outcome = await _mutate(engine.apply_reviewed_entries, Scope(scope), rows)
    await _broadcast(LedgerEventType.REVIEW_APPLIED, {"scope": scope, **outcome.to_dict()})
    return outcome.to_dict()


@app.get("/api/mode")
async def get_mode():
    return {"mode": engine.mode.value}


@app.put("/api/mode")
async def set_mode(body: SetModeRequest):
    await _mutate(engine.set_mode, body.mode)
    await _broadcast(LedgerEventType.MODE_CHANGED, {"mode": engine.mode.value})
    return {"mode": engine.mode.value}


# -- Aggregates and KPIs -----------------------------------------------------


@app.get("/api/aggregate")
async def get_aggregate():
    view = engine.get_aggregate_view()
    return {**view.to_dict(), "shares": view.shares()}


@app.get("/api/kpis")
async def get_kpis(year: Optional[int] = Query(default=None)):
    return engine.get_kpis(reporting_year=year).to_dict()


@app.post("/api/kpis")
async def compute_kpis_for_profile(body: CompanyProfileSchema, year: Optional[int] = Query(default=None)):
    """KPIs for an ad-hoc profile; the stored profile is left untouched."""
    return engine.get_kpis(profile=body.to_profile(), reporting_year=year).to_dict()


@app.get("/api/top-emitters")
async def get_top_emitters(limit: int = Query(default=10, ge=1, le=100)):
    return [asdict(share) for share in engine.top_emitters(limit)]


@app.get("/api/advanced-breakdown")
async def get_advanced_breakdown():
    return asdict(engine.advanced_breakdown())


@app.get("/api/sections")
async def get_section_totals():
    return [asdict(section) for section in engine.section_totals().values()]


@app.get("/api/catalog/{scope}")
async def get_catalog_categories(scope: int = Path(ge=1, le=3)):
    """Factor categories available for a scope's entry form."""
    return {"scope": scope, "categories": categories_for_scope(scope)}


# -- Company profile ---------------------------------------------------------


@app.get("/api/profile")
async def get_profile():
    return CompanyProfileSchema.from_profile(engine.profile).model_dump()


@app.put("/api/profile")
async def update_profile(body: CompanyProfileSchema):
    await _mutate(engine.set_profile, body.to_profile())
    return body.model_dump()


# -- Export, reset, stream ---------------------------------------------------


@app.get("/api/export.csv")
async def export_csv():
    content = export_ledger_csv(engine.counted_entries())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="carbon-ledger.csv"'},
    )


@app.get("/api/export/advanced.csv")
async def export_advanced():
    content = export_advanced_csv(engine.advanced_entries())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="scope3-ghg-protocol.csv"'},
    )


@app.post("/api/reset")
async def reset():
    await _mutate(engine.clear_all)
    await _broadcast(LedgerEventType.LEDGER_RESET, {})
    return {"status": "reset"}


@app.get("/api/stream")
async def stream(request: Request):
    """SSE endpoint — streams ledger change events to read-only consumers."""
    last_event_id: int | None = None
    raw = request.headers.get("Last-Event-ID") or request.headers.get("last-event-id")
    if raw is not None:
        try:
            last_event_id = int(raw)
        except ValueError:
            pass

    generator = stream_manager.event_generator(DEFAULT_CHANNEL, last_event_id=last_event_id)
    return StreamingResponse(generator, media_type="text/event-stream")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "mode": engine.mode.value,
        "degraded_advanced_data": engine.degraded_advanced_data,
    }


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    import uvicorn

    uvicorn.run("carbon_ledger.main:app", host="127.0.0.1", port=8000)
