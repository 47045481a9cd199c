"""KPI formula implementations.

Each function is a pure calculation with no side effects. ``total_tonnes``
is the grand total converted to tCO2e; profile figures use the units
documented on CompanyProfile. A zero or negative denominator never
raises: ratio KPIs fall back to 0, comparisons to None.
"""

from typing import Optional

from carbon_ledger.kpi_library.registry import register_kpi


def _relative_change(current: float, reference: float) -> Optional[float]:
    if reference <= 0:
        return None
    return (current - reference) / reference * 100


@register_kpi(
    kpi_id="carbon_intensity",
    label="Carbon intensity",
    description="Emissions per unit of revenue. Formula: total_tonnes / revenue (tCO2e per k€).",
    required_inputs=["revenue"],
    unit="tCO2e/k€",
)
def calc_carbon_intensity(total_tonnes: float, revenue: float) -> float:
    """Intensity = Total_tCO2e / Revenue_k€"""
    if revenue <= 0:
        return 0.0
    return total_tonnes / revenue


@register_kpi(
    kpi_id="per_employee",
    label="Emissions per employee",
    description="Formula: total_tonnes / headcount (tCO2e per person).",
    required_inputs=["headcount"],
    unit="tCO2e/person",
)
def calc_per_employee(total_tonnes: float, headcount: float) -> float:
    if headcount <= 0:
        return 0.0
    return total_tonnes / headcount


@register_kpi(
    kpi_id="yoy_variation",
    label="Year-over-year variation",
    description=(
        "Change against the previous reporting period. "
        "Formula: (total_tonnes - previous) / previous * 100."
    ),
    required_inputs=["previous_period_emissions"],
)
def calc_yoy_variation(total_tonnes: float, previous_period_emissions: float) -> Optional[float]:
    return _relative_change(total_tonnes, previous_period_emissions)


@register_kpi(
    kpi_id="sbti_progress",
    label="SBTi trajectory progress",
    description=(
        "Progress along the reduction path from the previous-period baseline "
        "to this year's SBTi target. Formula: (baseline - current) / (baseline - target) * 100."
    ),
    required_inputs=["previous_period_emissions", "sbti_target"],
)
def calc_sbti_progress(
    total_tonnes: float,
    previous_period_emissions: float,
    sbti_target: Optional[float],
) -> Optional[float]:
    """None without a target for the year; 100/0 (on or off target) without a usable baseline."""
    if sbti_target is None:
        return None
    if previous_period_emissions > sbti_target:
        return (previous_period_emissions - total_tonnes) / (previous_period_emissions - sbti_target) * 100
    return 100.0 if total_tonnes <= sbti_target else 0.0


@register_kpi(
    kpi_id="vs_sector_average",
    label="Gap to sector average",
    description="Formula: (total_tonnes - sector_average) / sector_average * 100.",
    required_inputs=["sector_average"],
)
def calc_vs_sector_average(total_tonnes: float, sector_average: float) -> Optional[float]:
    return _relative_change(total_tonnes, sector_average)


@register_kpi(
    kpi_id="vs_sector_leader",
    label="Gap to sector leader",
    description="Formula: (total_tonnes - sector_leader) / sector_leader * 100.",
    required_inputs=["sector_leader"],
)
def calc_vs_sector_leader(total_tonnes: float, sector_leader: float) -> Optional[float]:
    return _relative_change(total_tonnes, sector_leader)
