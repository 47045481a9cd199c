"""Tests for the standard factor catalog and the GHG-Protocol Scope-3 catalog."""

import pytest

import carbon_ledger.factor_library.base_carbone  # noqa: F401
from carbon_ledger.engine.errors import UnknownFactor
from carbon_ledger.factor_library.ghg_scope3 import (
    SCOPE3_CATEGORIES,
    get_category,
    get_category_by_number,
    get_downstream_categories,
    get_upstream_categories,
    lookup_advanced,
)
from carbon_ledger.factor_library.registry import (
    categories_for_scope,
    lookup,
    register_factor,
)
from carbon_ledger.models.enums import CalculationMethod, Scope


class TestFactorCatalog:
    def test_lookup_returns_factor_entry(self):
        factor = lookup(1, "combustibles", "diesel")
        assert factor.factor == 2.68
        assert factor.unit == "litre"
        assert factor.scope is Scope.SCOPE_1

    def test_lookup_scope2_electricity(self):
        factor = lookup(Scope.SCOPE_2, "electricite", "france")
        assert factor.factor == 0.057
        assert factor.unit == "kWh"

    def test_unknown_triple_raises(self):
        with pytest.raises(UnknownFactor) as exc_info:
            lookup(1, "combustibles", "kerosene_vert")
        assert exc_info.value.subcategory == "kerosene_vert"

    def test_factor_in_wrong_scope_is_unknown(self):
        with pytest.raises(UnknownFactor):
            lookup(2, "combustibles", "diesel")

    def test_invalid_scope_is_unknown(self):
        with pytest.raises(UnknownFactor):
            lookup(4, "combustibles", "diesel")

    def test_duplicate_registration_rejected(self):
        with pytest.raises(ValueError):
            register_factor(1, "combustibles", "diesel", "litre", 3.0, "Diesel bis")

    def test_categories_for_scope(self):
        assert "combustibles" in categories_for_scope(1)
        assert "electricite" in categories_for_scope(2)
        assert "electricite" not in categories_for_scope(1)


class TestGHGScope3Catalog:
    def test_fifteen_categories(self):
        assert [c.number for c in SCOPE3_CATEGORIES] == list(range(1, 16))

    def test_upstream_and_downstream_split(self):
        assert [c.number for c in get_upstream_categories()] == list(range(1, 9))
        assert [c.number for c in get_downstream_categories()] == list(range(9, 16))

    def test_get_category_by_number(self):
        category = get_category_by_number(5)
        assert category is not None
        assert category.id == "waste_generated"
        assert get_category_by_number(16) is None

    def test_lookup_uses_category_default_method(self):
        # Purchased goods default to the monetary method.
        factor = lookup_advanced("purchased_goods_services", "steel")
        assert factor.method is CalculationMethod.MONETARY
        assert factor.unit == "€"
        assert factor.factor == 0.89

    def test_lookup_falls_back_to_first_available_method(self):
        # Glass only offers an activity-based factor.
        factor = lookup_advanced("purchased_goods_services", "glass")
        assert factor.method is CalculationMethod.ACTUAL
        assert factor.unit == "kg"

    def test_explicit_method_must_exist(self):
        with pytest.raises(UnknownFactor):
            lookup_advanced("purchased_goods_services", "glass", CalculationMethod.MONETARY)

    def test_label_carries_category_number(self):
        factor = lookup_advanced("waste_generated", "landfill")
        assert factor.label == "Cat. 5 - Enfouissement"
        assert factor.uncertainty == 25

    def test_investment_factors_stored_in_kg(self):
        factor = lookup_advanced("investments", "equity_listed")
        assert factor.unit == "M€"
        assert factor.factor == pytest.approx(120_000)

    def test_unknown_subcategory_raises(self):
        with pytest.raises(UnknownFactor):
            lookup_advanced("waste_generated", "teleportation")
        assert get_category("nope") is None
