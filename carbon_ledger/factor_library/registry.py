from __future__ import annotations

from carbon_ledger.engine.errors import UnknownFactor
from carbon_ledger.models.entries import FactorEntry
from carbon_ledger.models.enums import Scope

# Global catalog -- maps (scope, category, subcategory) -> FactorEntry
_CATALOG: dict[tuple[Scope, str, str], FactorEntry] = {}


def register_factor(
    scope: int,
    category: str,
    subcategory: str,
    unit: str,
    factor: float,
    label: str,
    source: str = "Base Carbone ADEME",
    uncertainty: float = 0.0,
) -> FactorEntry:
    """Add one factor to the catalog. Re-registering a key is an error."""
    entry = FactorEntry(
        scope=Scope(scope),
        category=category,
        subcategory=subcategory,
        unit=unit,
        factor=factor,
        label=label,
        source=source,
        uncertainty=uncertainty,
    )
    if entry.key in _CATALOG:
        raise ValueError(f"Factor {entry.key} is already registered")
    _CATALOG[entry.key] = entry
    return entry


def lookup(scope: int, category: str, subcategory: str) -> FactorEntry:
    """Return the factor for a key, or raise UnknownFactor."""
    try:
        key = (Scope(scope), category, subcategory)
    except ValueError:
        raise UnknownFactor(scope, category, subcategory) from None
    entry = _CATALOG.get(key)
    if entry is None:
        raise UnknownFactor(key[0], category, subcategory)
    return entry


def categories_for_scope(scope: int) -> list[str]:
    scope = Scope(scope)
    seen: list[str] = []
    for key_scope, category, _ in _CATALOG:
        if key_scope is scope and category not in seen:
            seen.append(category)
    return seen


def catalog_units() -> set[str]:
    return {entry.unit for entry in _CATALOG.values()}
