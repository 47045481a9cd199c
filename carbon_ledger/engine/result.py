"""Immutable derived views computed from the ledgers. Never persisted."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class AggregateView:
    """Scope subtotals and grand total, in kg CO2e."""

    scope1_total: float
    scope2_total: float
    scope3_total: float
    grand_total: float
    advanced_mode: bool = False
    degraded_advanced_data: bool = False
    warnings: tuple[str, ...] = ()

    def scope_total(self, scope: int) -> float:
        return {1: self.scope1_total, 2: self.scope2_total, 3: self.scope3_total}[int(scope)]

    def shares(self) -> dict[int, float]:
        """Percent of the grand total per scope; all zero for an empty ledger."""
        if self.grand_total <= 0:
            return {1: 0.0, 2: 0.0, 3: 0.0}
        return {
            1: self.scope1_total / self.grand_total * 100,
            2: self.scope2_total / self.grand_total * 100,
            3: self.scope3_total / self.grand_total * 100,
        }

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["warnings"] = list(self.warnings)
        return data


@dataclass(frozen=True)
class KPIReport:
    """Normalised indicators derived from an AggregateView and a CompanyProfile."""

    carbon_intensity: float
    per_employee: float
    yoy_variation: Optional[float]
    sbti_progress: Optional[float]
    sbti_target: Optional[float] = None
    reporting_year: Optional[int] = None
    vs_sector_average: Optional[float] = None
    vs_sector_leader: Optional[float] = None
    total_tonnes: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EmitterShare:
    """One line of the top-emitters ranking."""

    label: str
    scope: int
    emissions: float
    percentage: float


@dataclass(frozen=True)
class SectionTotal:
    scope: int
    total: float
    entry_count: int


@dataclass(frozen=True)
class CategoryBreakdown:
    """Advanced Scope-3 figures grouped by GHG Protocol category."""

    by_category: dict[int, float] = field(default_factory=dict)
    upstream_total: float = 0.0
    downstream_total: float = 0.0
    average_uncertainty: float = 0.0
