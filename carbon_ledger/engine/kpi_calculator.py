"""Derives KPIs from an aggregate view and a company profile."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

# Ensure all formulas are registered on import
import carbon_ledger.kpi_library.formulas  # noqa: F401
from carbon_ledger.kpi_library.registry import get_kpi
from carbon_ledger.models.profile import CompanyProfile

from .result import AggregateView, KPIReport

logger = logging.getLogger(__name__)

KPI_IDS = (
    "carbon_intensity",
    "per_employee",
    "yoy_variation",
    "sbti_progress",
    "vs_sector_average",
    "vs_sector_leader",
)


def _profile_inputs(profile: CompanyProfile, reporting_year: int) -> dict[str, Any]:
    return {
        "revenue": profile.revenue,
        "headcount": profile.headcount,
        "previous_period_emissions": profile.previous_period_emissions,
        "sector_average": profile.sector_average,
        "sector_leader": profile.sector_leader,
        "sbti_target": profile.sbti_target(reporting_year),
    }


def run_kpi(kpi_id: str, total_tonnes: float, inputs: dict[str, Any]) -> Optional[float]:
    """Evaluate one registered KPI against the given inputs."""
    definition = get_kpi(kpi_id)
    if definition is None:
        raise KeyError(f"Unknown KPI '{kpi_id}'")
    kwargs = {name: inputs.get(name) for name in definition.required_inputs}
    return definition.formula_fn(total_tonnes=total_tonnes, **kwargs)


def compute_kpis(
    view: AggregateView,
    profile: Optional[CompanyProfile] = None,
    reporting_year: Optional[int] = None,
) -> KPIReport:
    """Pure function of the view's grand total and the profile."""
    profile = profile or CompanyProfile()
    year = reporting_year or date.today().year
    total_tonnes = view.grand_total / 1000
    inputs = _profile_inputs(profile, year)

    values = {kpi_id: run_kpi(kpi_id, total_tonnes, inputs) for kpi_id in KPI_IDS}
    if inputs["sbti_target"] is None:
        logger.debug("No SBTi target for %s; progress left undefined", year)

    return KPIReport(
        carbon_intensity=values["carbon_intensity"],
        per_employee=values["per_employee"],
        yoy_variation=values["yoy_variation"],
        sbti_progress=values["sbti_progress"],
        sbti_target=inputs["sbti_target"],
        reporting_year=year,
        vs_sector_average=values["vs_sector_average"],
        vs_sector_leader=values["vs_sector_leader"],
        total_tonnes=total_tonnes,
    )
