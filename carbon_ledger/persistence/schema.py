"""Pydantic models validating persisted ledger state.

Blobs are validated at load time and rejected as a whole when any part is
malformed. Persisted emissions are never trusted: they are recomputed
from quantity and factor.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from carbon_ledger.engine.errors import DegradedAdvancedData, MalformedPersistedState
from carbon_ledger.models.entries import LedgerEntry
from carbon_ledger.models.enums import AccountingMode, CalculationMethod, Scope
from carbon_ledger.models.profile import CompanyProfile


class LedgerEntrySchema(BaseModel):
    """Wire shape of one LedgerEntry."""

    id: str = Field(min_length=1)
    scope: int = Field(ge=1, le=3)
    category: str
    subcategory: str = ""
    label: str
    quantity: float = Field(ge=0, allow_inf_nan=False)
    unit: str
    factor: float = Field(ge=0, allow_inf_nan=False)
    emissions: float = Field(default=0.0, description="Ignored on load; recomputed")
    created_at: Optional[datetime] = None
    formula: str = ""
    method: Optional[CalculationMethod] = None
    uncertainty: float = Field(default=0.0, ge=0, le=100)
    category_number: Optional[int] = Field(default=None, ge=1, le=15)

    @classmethod
    def from_entry(cls, entry: LedgerEntry) -> LedgerEntrySchema:
        return cls(
            id=entry.id,
            scope=int(entry.scope),
            category=entry.category,
            subcategory=entry.subcategory,
            label=entry.label,
            quantity=entry.quantity,
            unit=entry.unit,
            factor=entry.factor,
            emissions=entry.emissions,
            created_at=entry.created_at,
            formula=entry.formula,
            method=entry.method,
            uncertainty=entry.uncertainty,
            category_number=entry.category_number,
        )

    def to_entry(self) -> LedgerEntry:
        entry = LedgerEntry(
            id=self.id,
            scope=Scope(self.scope),
            category=self.category,
            subcategory=self.subcategory,
            label=self.label,
            quantity=self.quantity,
            unit=self.unit,
            factor=self.factor,
            emissions=self.emissions,
            created_at=self.created_at or datetime.now(tz=timezone.utc),
            formula=self.formula,
            method=self.method,
            uncertainty=self.uncertainty,
            category_number=self.category_number,
        )
        # Always rebuild emissions and formula from quantity x factor.
        return entry.revised()


class LedgerState(BaseModel):
    """Persisted content of one ledger (or the advanced store)."""

    scope: int = Field(ge=1, le=3)
    entries: list[LedgerEntrySchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def entries_match_scope_and_ids_unique(self) -> LedgerState:
        seen: set[str] = set()
        for entry in self.entries:
            if entry.scope != self.scope:
                raise ValueError(
                    f"Entry '{entry.id}' has scope {entry.scope}, expected {self.scope}"
                )
            if entry.id in seen:
                raise ValueError(f"Duplicate entry id '{entry.id}'")
            seen.add(entry.id)
        return self


class ModeState(BaseModel):
    mode: AccountingMode = AccountingMode.STANDARD


class CompanyProfileSchema(BaseModel):
    """Company figures read by KPI derivation. Units: k€, persons, tCO2e."""

    revenue: float = Field(default=0.0, allow_inf_nan=False)
    headcount: float = Field(default=0.0, allow_inf_nan=False)
    previous_period_emissions: float = Field(default=0.0, allow_inf_nan=False)
    sector_average: float = Field(default=0.0, allow_inf_nan=False)
    sector_leader: float = Field(default=0.0, allow_inf_nan=False)
    sbti_targets_by_year: dict[int, float] = Field(default_factory=dict)

    @field_validator("sbti_targets_by_year")
    @classmethod
    def targets_non_negative(cls, v: dict[int, float]) -> dict[int, float]:
        for year, target in v.items():
            if target < 0:
                raise ValueError(f"SBTi target for {year} must be >= 0, got {target}")
        return v

    @classmethod
    def from_profile(cls, profile: CompanyProfile) -> CompanyProfileSchema:
        return cls(
            revenue=profile.revenue,
            headcount=profile.headcount,
            previous_period_emissions=profile.previous_period_emissions,
            sector_average=profile.sector_average,
            sector_leader=profile.sector_leader,
            sbti_targets_by_year=dict(profile.sbti_targets_by_year),
        )

    def to_profile(self) -> CompanyProfile:
        return CompanyProfile(
            revenue=self.revenue,
            headcount=self.headcount,
            previous_period_emissions=self.previous_period_emissions,
            sector_average=self.sector_average,
            sector_leader=self.sector_leader,
            sbti_targets_by_year=dict(self.sbti_targets_by_year),
        )


# -- Codecs ----------------------------------------------------------------


def encode_ledger(scope: Scope, entries: list[LedgerEntry]) -> str:
    state = LedgerState(scope=int(scope), entries=[LedgerEntrySchema.from_entry(e) for e in entries])
    return state.model_dump_json()


def decode_ledger(key: str, payload: str, scope: Scope) -> list[LedgerEntry]:
    """Parse a ledger blob, raising MalformedPersistedState on any defect."""
    try:
        state = LedgerState.model_validate_json(payload)
    except ValidationError as exc:
        raise MalformedPersistedState(key, f"{exc.error_count()} validation error(s)") from exc
    if state.scope != int(scope):
        raise MalformedPersistedState(key, f"stored scope {state.scope}, expected {int(scope)}")
    return [entry.to_entry() for entry in state.entries]


def decode_advanced_store(key: str, payload: str) -> list[LedgerEntry]:
    """Like decode_ledger, but a defect degrades Scope 3 instead of resetting it."""
    try:
        return decode_ledger(key, payload, Scope.SCOPE_3)
    except MalformedPersistedState as exc:
        raise DegradedAdvancedData(key, exc.reason) from exc


def encode_mode(mode: AccountingMode) -> str:
    return ModeState(mode=mode).model_dump_json()


def decode_mode(key: str, payload: str) -> AccountingMode:
    try:
        return ModeState.model_validate_json(payload).mode
    except ValidationError as exc:
        raise MalformedPersistedState(key, f"{exc.error_count()} validation error(s)") from exc


def encode_profile(profile: CompanyProfile) -> str:
    return CompanyProfileSchema.from_profile(profile).model_dump_json()


def decode_profile(key: str, payload: str) -> CompanyProfile:
    try:
        return CompanyProfileSchema.model_validate_json(payload).to_profile()
    except ValidationError as exc:
        raise MalformedPersistedState(key, f"{exc.error_count()} validation error(s)") from exc
