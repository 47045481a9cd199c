"""Tests for KPI formulas, the KPI registry and KPI derivation."""

import math

import pytest

import carbon_ledger.kpi_library.formulas  # noqa: F401
from carbon_ledger.engine.kpi_calculator import compute_kpis
from carbon_ledger.engine.result import AggregateView
from carbon_ledger.kpi_library.formulas import (
    calc_carbon_intensity,
    calc_per_employee,
    calc_sbti_progress,
    calc_vs_sector_average,
    calc_yoy_variation,
)
from carbon_ledger.kpi_library.registry import get_all_kpis, get_kpi
from carbon_ledger.models.profile import CompanyProfile


def _view(grand_total_kg: float) -> AggregateView:
    return AggregateView(
        scope1_total=grand_total_kg,
        scope2_total=0.0,
        scope3_total=0.0,
        grand_total=grand_total_kg,
    )


class TestKPIRegistry:
    def test_all_kpis_registered(self):
        assert set(get_all_kpis()) >= {
            "carbon_intensity",
            "per_employee",
            "yoy_variation",
            "sbti_progress",
            "vs_sector_average",
            "vs_sector_leader",
        }

    def test_get_kpi_returns_none_for_missing(self):
        assert get_kpi("nonexistent_kpi") is None

    def test_registered_formula_is_callable(self):
        kpi = get_kpi("carbon_intensity")
        assert kpi is not None
        assert kpi.required_inputs == ["revenue"]
        assert kpi.formula_fn(total_tonnes=10, revenue=5) == 2


class TestFormulas:
    def test_carbon_intensity_zero_revenue(self):
        assert calc_carbon_intensity(12.0, 0) == 0.0

    def test_carbon_intensity_negative_revenue(self):
        assert calc_carbon_intensity(12.0, -10) == 0.0

    def test_per_employee_zero_headcount(self):
        assert calc_per_employee(12.0, 0) == 0.0

    def test_yoy_undefined_without_previous_period(self):
        assert calc_yoy_variation(12.0, 0) is None

    def test_yoy_decrease(self):
        assert calc_yoy_variation(3.0, 4.0) == pytest.approx(-25.0)

    def test_sbti_progress_along_reduction_path(self):
        # Baseline 4 t, target 2 t, current 3 t: halfway there.
        assert calc_sbti_progress(3.0, 4.0, 2.0) == pytest.approx(50.0)

    def test_sbti_progress_without_target(self):
        assert calc_sbti_progress(3.0, 4.0, None) is None

    def test_sbti_progress_without_baseline(self):
        assert calc_sbti_progress(1.5, 0.0, 2.0) == 100.0
        assert calc_sbti_progress(2.5, 0.0, 2.0) == 0.0

    def test_sector_gap_guarded(self):
        assert calc_vs_sector_average(3.0, 0) is None
        assert calc_vs_sector_average(3.0, 2.0) == pytest.approx(50.0)


class TestComputeKPIs:
    def test_scenario_d_zero_revenue(self):
        report = compute_kpis(_view(5_000), CompanyProfile(revenue=0), 2030)
        assert report.carbon_intensity == 0
        assert not math.isnan(report.carbon_intensity)
        assert not math.isinf(report.carbon_intensity)

    def test_full_profile(self, profile):
        # 3 000 kg = 3 t
        report = compute_kpis(_view(3_000), profile, 2030)
        assert report.total_tonnes == pytest.approx(3.0)
        assert report.carbon_intensity == pytest.approx(3.0 / 2_000)
        assert report.per_employee == pytest.approx(3.0 / 25)
        assert report.yoy_variation == pytest.approx(-25.0)
        assert report.sbti_target == 2.0
        assert report.sbti_progress == pytest.approx(50.0)
        assert report.vs_sector_average == pytest.approx(20.0)
        assert report.vs_sector_leader == pytest.approx(200.0)

    def test_target_looked_up_by_reporting_year(self, profile):
        report = compute_kpis(_view(3_000), profile, 2031)
        assert report.sbti_target is None
        assert report.sbti_progress is None

    def test_empty_profile_never_raises(self):
        report = compute_kpis(_view(0.0), None, 2030)
        assert report.carbon_intensity == 0
        assert report.per_employee == 0
        assert report.yoy_variation is None
        assert report.sbti_progress is None

    def test_engine_uses_stored_profile(self, populated_engine, profile):
        populated_engine.set_profile(profile)
        report = populated_engine.get_kpis()
        assert report.total_tonnes == pytest.approx(1.785)
        assert report.reporting_year == 2030
        assert report.carbon_intensity == pytest.approx(1.785 / 2_000)

    def test_explicit_profile_overrides_stored(self, populated_engine, profile):
        populated_engine.set_profile(profile)
        report = populated_engine.get_kpis(CompanyProfile(headcount=0))
        assert report.per_employee == 0
