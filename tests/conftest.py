"""Shared test fixtures for the carbon ledger test suite."""

import pytest

from carbon_ledger.engine.ledger_engine import CarbonLedgerEngine
from carbon_ledger.models.enums import AccountingMode, Scope
from carbon_ledger.models.profile import CompanyProfile
from carbon_ledger.persistence.memory import InMemoryPersistence


@pytest.fixture
def store() -> InMemoryPersistence:
    return InMemoryPersistence()


@pytest.fixture
def engine(store) -> CarbonLedgerEngine:
    """Empty engine in standard mode, mirrored to an in-memory store."""
    return CarbonLedgerEngine(persistence=store, reporting_year=2030)


@pytest.fixture
def populated_engine(engine) -> CarbonLedgerEngine:
    """Diesel (268 kg), French electricity (57 kg) and a 1 t steel purchase (1460 kg)."""
    engine.add_entry(Scope.SCOPE_1, "combustibles", "diesel", 100)
    engine.add_entry(Scope.SCOPE_2, "electricite", "france", 1000)
    engine.add_entry(Scope.SCOPE_3, "materiaux", "acier", 1000)
    return engine


@pytest.fixture
def advanced_engine(populated_engine) -> CarbonLedgerEngine:
    """populated_engine plus two advanced entries, switched to advanced mode.

    Advanced store: purchased aluminium (100 kg x 8.24 = 824 kg, 10% uncertainty)
    and landfilled waste (1000 kg x 0.48 = 480 kg, 25% uncertainty).
    """
    populated_engine.add_advanced_entry("purchased_goods_services", "aluminium", 100, method="actual")
    populated_engine.add_advanced_entry("waste_generated", "landfill", 1000)
    populated_engine.set_mode(AccountingMode.ADVANCED)
    return populated_engine


@pytest.fixture
def profile() -> CompanyProfile:
    """k€ revenue, tCO2e benchmarks."""
    return CompanyProfile(
        revenue=2_000.0,
        headcount=25,
        previous_period_emissions=4.0,
        sector_average=2.5,
        sector_leader=1.0,
        sbti_targets_by_year={2030: 2.0},
    )
