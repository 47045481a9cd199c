from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

# Global registry -- maps kpi_id -> KPIDefinition
_REGISTRY: dict[str, KPIDefinition] = {}


@dataclass(frozen=True)
class KPIDefinition:
    """A normalised indicator derived from the grand total and the company profile."""

    id: str
    label: str
    description: str
    required_inputs: list[str]  # CompanyProfile field names
    formula_fn: Callable[..., Optional[float]]
    unit: str = "percent"


def register_kpi(
    kpi_id: str,
    label: str,
    description: str,
    required_inputs: list[str],
    unit: str = "percent",
) -> Callable:
    """Decorator to register a formula function as a KPI."""

    def decorator(fn: Callable[..., Optional[float]]) -> Callable[..., Optional[float]]:
        if kpi_id in _REGISTRY:
            raise ValueError(f"KPI '{kpi_id}' is already registered")
        _REGISTRY[kpi_id] = KPIDefinition(
            id=kpi_id,
            label=label,
            description=description,
            required_inputs=required_inputs,
            formula_fn=fn,
            unit=unit,
        )
        return fn

    return decorator


def get_kpi(kpi_id: str) -> Optional[KPIDefinition]:
    """Look up a KPI definition by ID."""
    return _REGISTRY.get(kpi_id)


def get_all_kpis() -> dict[str, KPIDefinition]:
    """Return the full registry (read-only copy)."""
    return dict(_REGISTRY)
