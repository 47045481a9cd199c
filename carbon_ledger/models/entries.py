"""Ledger record types: factors, activity inputs, ledger and review entries."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from .enums import CalculationMethod, EntryOrigin, Scope


@dataclass(frozen=True)
class FactorEntry:
    """One emission factor from the reference catalog (kg CO2e per unit)."""

    scope: Scope
    category: str
    subcategory: str
    unit: str
    factor: float
    label: str
    source: str = "Base Carbone ADEME"
    uncertainty: float = 0.0
    method: Optional[CalculationMethod] = None

    @property
    def key(self) -> tuple[Scope, str, str]:
        return (self.scope, self.category, self.subcategory)


@dataclass(frozen=True)
class ActivityInput:
    """A raw user-entered activity, consumed immediately to produce a LedgerEntry."""

    scope: Scope
    category: str
    subcategory: str
    raw_quantity: float
    input_unit: str


def build_formula(quantity: float, unit: str, factor: float, emissions: float) -> str:
    """Human-readable audit trail for one entry."""
    return (
        f"{quantity:g} {unit} × {factor:g} kgCO2e/{unit} "
        f"= {emissions:.2f} kgCO2e"
    )


@dataclass(frozen=True)
class LedgerEntry:
    """A recorded, costed activity.

    ``emissions`` always equals ``quantity * factor``; use ``revised`` to
    change quantity or factor so the product and formula are recomputed.
    """

    id: str
    scope: Scope
    category: str
    subcategory: str
    label: str
    quantity: float
    unit: str
    factor: float
    emissions: float
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    formula: str = ""
    method: Optional[CalculationMethod] = None
    uncertainty: float = 0.0
    category_number: Optional[int] = None

    @classmethod
    def create(
        cls,
        entry_id: str,
        factor_entry: FactorEntry,
        quantity: float,
        category_number: Optional[int] = None,
    ) -> LedgerEntry:
        emissions = quantity * factor_entry.factor
        return cls(
            id=entry_id,
            scope=factor_entry.scope,
            category=factor_entry.category,
            subcategory=factor_entry.subcategory,
            label=factor_entry.label,
            quantity=quantity,
            unit=factor_entry.unit,
            factor=factor_entry.factor,
            emissions=emissions,
            formula=build_formula(quantity, factor_entry.unit, factor_entry.factor, emissions),
            method=factor_entry.method,
            uncertainty=factor_entry.uncertainty,
            category_number=category_number,
        )

    def revised(
        self,
        quantity: Optional[float] = None,
        factor: Optional[float] = None,
        label: Optional[str] = None,
        unit: Optional[str] = None,
    ) -> LedgerEntry:
        """Return a copy with updated fields and emissions recomputed."""
        new_quantity = self.quantity if quantity is None else quantity
        new_factor = self.factor if factor is None else factor
        new_unit = self.unit if unit is None else unit
        emissions = new_quantity * new_factor
        return replace(
            self,
            quantity=new_quantity,
            factor=new_factor,
            unit=new_unit,
            label=self.label if label is None else label,
            emissions=emissions,
            formula=build_formula(new_quantity, new_unit, new_factor, emissions),
        )

    def recomputed(self) -> LedgerEntry:
        """Copy whose emissions are derived from quantity and factor again."""
        if self.emissions == self.quantity * self.factor and self.formula:
            return self
        return self.revised()


@dataclass(frozen=True)
class ReviewEntry:
    """One row of the review surface, tagged with the store that owns it.

    ``total`` is display-only; it is never trusted when edits are applied.
    """

    id: str
    label: str
    quantity: float
    unit: str
    factor: float
    total: float
    origin: EntryOrigin = EntryOrigin.STANDARD
    category: str = ""
    subcategory: str = ""

    @classmethod
    def from_entry(cls, entry: LedgerEntry, origin: EntryOrigin) -> ReviewEntry:
        return cls(
            id=entry.id,
            label=entry.label,
            quantity=entry.quantity,
            unit=entry.unit,
            factor=entry.factor,
            total=entry.emissions,
            origin=origin,
            category=entry.category,
            subcategory=entry.subcategory,
        )
