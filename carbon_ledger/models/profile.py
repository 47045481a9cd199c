from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class CompanyProfile:
    """Host-owned company figures read by KPI derivation.

    ``revenue`` is in k€; emissions figures (previous period, sector
    benchmarks, SBTi targets) are in tCO2e.
    """

    revenue: float = 0.0
    headcount: float = 0.0
    previous_period_emissions: float = 0.0
    sector_average: float = 0.0
    sector_leader: float = 0.0
    sbti_targets_by_year: dict[int, float] = field(default_factory=dict)

    def sbti_target(self, year: int) -> Optional[float]:
        return self.sbti_targets_by_year.get(year)
