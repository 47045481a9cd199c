"""GHG Protocol Scope 3: the 15 value-chain categories used in advanced mode.

Categories 1-8 are upstream, 9-15 downstream. Each subcategory offers one
or more calculation methods, each with its own factor (kg CO2e per unit),
source and uncertainty percentage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from carbon_ledger.engine.errors import UnknownFactor
from carbon_ledger.models.entries import FactorEntry
from carbon_ledger.models.enums import CalculationMethod, Scope, Scope3Direction

ACTUAL = CalculationMethod.ACTUAL
TECHNICAL = CalculationMethod.TECHNICAL
MONETARY = CalculationMethod.MONETARY

_ADEME = "Base Carbone ADEME"
_RATIOS = "ADEME - Ratios monétaires"

# PCAF ratios are published in tCO2e per M€; the ledger works in kg.
_TONNES_TO_KG = 1000.0


@dataclass(frozen=True)
class MethodFactor:
    value: float
    source: str
    uncertainty: float
    unit: Optional[str] = None  # quantity unit, when it differs from the subcategory's


@dataclass(frozen=True)
class Scope3Subcategory:
    id: str
    name: str
    unit: str
    factors: dict[CalculationMethod, MethodFactor]

    def quantity_unit(self, method: CalculationMethod) -> str:
        factor = self.factors[method]
        if factor.unit:
            return factor.unit
        if method is MONETARY:
            return "€"
        return self.unit


@dataclass(frozen=True)
class Scope3Category:
    id: str
    number: int
    name: str
    short_name: str
    direction: Scope3Direction
    default_method: CalculationMethod
    subcategories: list[Scope3Subcategory] = field(default_factory=list)

    def get_subcategory(self, subcategory_id: str) -> Optional[Scope3Subcategory]:
        for sub in self.subcategories:
            if sub.id == subcategory_id:
                return sub
        return None


def _sub(id: str, name: str, unit: str, **factors: MethodFactor) -> Scope3Subcategory:
    return Scope3Subcategory(
        id=id,
        name=name,
        unit=unit,
        factors={CalculationMethod(m): f for m, f in factors.items()},
    )


_f = MethodFactor

SCOPE3_CATEGORIES: list[Scope3Category] = [
    Scope3Category(
        "purchased_goods_services", 1, "Biens et services achetés", "Achats",
        Scope3Direction.UPSTREAM, MONETARY, [
            _sub("steel", "Acier", "kg",
                 actual=_f(1.46, _ADEME, 10), monetary=_f(0.89, _RATIOS, 30)),
            _sub("aluminium", "Aluminium", "kg",
                 actual=_f(8.24, _ADEME, 10), monetary=_f(1.25, _RATIOS, 30)),
            _sub("plastics", "Plastiques", "kg",
                 actual=_f(2.28, "Base Carbone ADEME - PET", 15), monetary=_f(0.75, _RATIOS, 30)),
            _sub("paper_cardboard", "Papier et carton", "kg",
                 actual=_f(0.92, _ADEME, 15), monetary=_f(0.45, _RATIOS, 30)),
            _sub("cement", "Ciment", "kg",
                 actual=_f(0.918, _ADEME, 10), monetary=_f(0.35, _RATIOS, 30)),
            _sub("glass", "Verre", "kg", actual=_f(0.85, _ADEME, 15)),
            _sub("copper", "Cuivre", "kg", actual=_f(4.20, _ADEME, 15)),
            _sub("chemicals", "Produits chimiques", "kg",
                 actual=_f(2.5, "Base Carbone ADEME - moyenne", 25), monetary=_f(0.65, _RATIOS, 30)),
            _sub("it_services", "Services informatiques", "€", monetary=_f(0.28, _RATIOS, 30)),
            _sub("legal_consulting", "Services juridiques et conseil", "€", monetary=_f(0.12, _RATIOS, 25)),
            _sub("marketing_advertising", "Marketing et publicité", "€", monetary=_f(0.18, _RATIOS, 30)),
            _sub("insurance", "Assurances", "€", monetary=_f(0.08, _RATIOS, 25)),
            _sub("maintenance_services", "Maintenance et entretien", "€", monetary=_f(0.22, _RATIOS, 30)),
            _sub("office_supplies", "Fournitures de bureau", "€", monetary=_f(0.45, _RATIOS, 30)),
            _sub("cleaning_services", "Services de nettoyage", "€", monetary=_f(0.15, _RATIOS, 30)),
            _sub("catering", "Restauration", "€", monetary=_f(0.55, _RATIOS, 30)),
        ],
    ),
    Scope3Category(
        "capital_goods", 2, "Biens d'équipement (Immobilisations)", "Immobilisations",
        Scope3Direction.UPSTREAM, MONETARY, [
            _sub("buildings", "Bâtiments", "m²",
                 actual=_f(450, "Base Carbone ADEME - bureau neuf", 20), monetary=_f(0.35, _RATIOS, 30)),
            _sub("machinery", "Machines et équipements", "kg",
                 actual=_f(3.5, "Estimation technique", 25), monetary=_f(0.45, _RATIOS, 30)),
            _sub("vehicles", "Véhicules", "unité",
                 actual=_f(6000, "Base Carbone ADEME - VP moyenne", 20), monetary=_f(0.38, _RATIOS, 30)),
            _sub("it_equipment", "Équipement informatique", "unité",
                 actual=_f(350, _ADEME, 20), monetary=_f(0.55, _RATIOS, 30)),
            _sub("furniture", "Mobilier", "kg",
                 actual=_f(1.8, "Estimation technique", 25), monetary=_f(0.32, _RATIOS, 30)),
        ],
    ),
    Scope3Category(
        "fuel_energy_activities", 3, "Activités liées à l'énergie (hors Scopes 1 & 2)", "Énergie amont",
        Scope3Direction.UPSTREAM, ACTUAL, [
            _sub("upstream_electricity", "Amont électricité", "kWh",
                 actual=_f(0.012, "Base Carbone ADEME - amont élec FR", 15)),
            _sub("upstream_natural_gas", "Amont gaz naturel", "kWh PCI", actual=_f(0.039, _ADEME, 15)),
            _sub("upstream_diesel", "Amont gazole", "litre", actual=_f(0.62, _ADEME, 15)),
            _sub("upstream_gasoline", "Amont essence", "litre", actual=_f(0.51, _ADEME, 15)),
            _sub("transmission_losses", "Pertes en ligne électricité", "kWh", actual=_f(0.0045, _ADEME, 20)),
        ],
    ),
    Scope3Category(
        "upstream_transport", 4, "Transport et distribution amont", "Transport amont",
        Scope3Direction.UPSTREAM, ACTUAL, [
            _sub("road_transport", "Transport routier", "t.km",
                 actual=_f(0.111, "Base Carbone ADEME - poids lourd", 15), monetary=_f(0.85, "Estimation", 35)),
            _sub("rail_transport", "Transport ferroviaire", "t.km", actual=_f(0.033, _ADEME, 15)),
            _sub("maritime_transport", "Transport maritime", "t.km", actual=_f(0.015, _ADEME, 20)),
            _sub("air_transport", "Transport aérien", "t.km", actual=_f(1.47, _ADEME, 20)),
            _sub("river_transport", "Transport fluvial", "t.km", actual=_f(0.037, _ADEME, 20)),
        ],
    ),
    Scope3Category(
        "waste_generated", 5, "Déchets générés par les activités", "Déchets",
        Scope3Direction.UPSTREAM, ACTUAL, [
            _sub("recycling", "Recyclage", "kg", actual=_f(0.025, _ADEME, 20)),
            _sub("incineration", "Incinération", "kg", actual=_f(0.78, _ADEME, 20)),
            _sub("landfill", "Enfouissement", "kg", actual=_f(0.48, _ADEME, 25)),
            _sub("composting", "Compostage", "kg", actual=_f(0.015, _ADEME, 25)),
            _sub("methanization", "Méthanisation", "kg", actual=_f(0.022, _ADEME, 25)),
            _sub("hazardous_waste", "Déchets dangereux", "kg", actual=_f(1.2, "Estimation technique", 30)),
        ],
    ),
    Scope3Category(
        "business_travel", 6, "Déplacements professionnels", "Voyages pro",
        Scope3Direction.UPSTREAM, ACTUAL, [
            _sub("air_short_haul", "Avion court-courrier", "passager.km", actual=_f(0.230, _ADEME, 15)),
            _sub("air_medium_haul", "Avion moyen-courrier", "passager.km", actual=_f(0.187, _ADEME, 15)),
            _sub("air_long_haul", "Avion long-courrier", "passager.km", actual=_f(0.152, _ADEME, 15)),
            _sub("train_tgv", "Train grande vitesse (TGV)", "passager.km", actual=_f(0.0032, _ADEME, 10)),
            _sub("train_ter", "Train régional (TER)", "passager.km", actual=_f(0.0295, _ADEME, 15)),
            _sub("car_rental", "Voiture de location", "km", actual=_f(0.193, _ADEME, 15)),
            _sub("taxi", "Taxi/VTC", "km", actual=_f(0.220, "Estimation technique", 20)),
            _sub("hotel_nights", "Nuitées d'hôtel", "nuitée",
                 actual=_f(19.5, "Base Carbone ADEME - hôtel moyen", 25)),
        ],
    ),
    Scope3Category(
        "employee_commuting", 7, "Déplacements domicile-travail", "Trajets salariés",
        Scope3Direction.UPSTREAM, TECHNICAL, [
            _sub("car_commute", "Voiture individuelle", "km", actual=_f(0.193, _ADEME, 15)),
            _sub("carpool", "Covoiturage", "km", actual=_f(0.097, "Base Carbone ADEME / 2", 20)),
            _sub("public_transport", "Transports en commun", "km",
                 actual=_f(0.035, "Base Carbone ADEME - moyenne TC", 20)),
            _sub("train_commute", "Train de banlieue", "km", actual=_f(0.0045, _ADEME, 15)),
            _sub("motorcycle", "Moto/Scooter", "km", actual=_f(0.089, _ADEME, 20)),
            _sub("bicycle", "Vélo/Marche", "km", actual=_f(0.0, "Zéro émission directe", 0)),
            _sub("telework", "Télétravail", "jour", actual=_f(1.2, "ADEME - consommation domicile", 30)),
        ],
    ),
    Scope3Category(
        "upstream_leased_assets", 8, "Actifs loués amont", "Locations amont",
        Scope3Direction.UPSTREAM, ACTUAL, [
            _sub("leased_offices", "Bureaux loués", "m².an",
                 actual=_f(25, "ADEME - bureau tertiaire moyen", 25), monetary=_f(0.15, "Estimation", 35)),
            _sub("leased_vehicles", "Véhicules loués", "véhicule.an",
                 actual=_f(1200, "Base Carbone ADEME - amorti sur 5 ans", 25)),
            _sub("leased_equipment", "Équipements loués", "€",
                 monetary=_f(0.35, "Estimation technique", 35)),
            _sub("leased_warehouses", "Entrepôts loués", "m².an",
                 actual=_f(18, "ADEME - entrepôt logistique", 25)),
        ],
    ),
    Scope3Category(
        "downstream_transport", 9, "Transport et distribution aval", "Transport aval",
        Scope3Direction.DOWNSTREAM, ACTUAL, [
            _sub("delivery_road", "Livraison routière", "t.km", actual=_f(0.111, _ADEME, 15)),
            _sub("delivery_express", "Livraison express", "colis",
                 actual=_f(0.85, "Estimation - colis moyen", 30)),
            _sub("delivery_maritime", "Livraison maritime", "t.km", actual=_f(0.015, _ADEME, 20)),
            _sub("delivery_air", "Livraison aérienne", "t.km", actual=_f(1.47, _ADEME, 20)),
        ],
    ),
    Scope3Category(
        "processing_sold_products", 10, "Transformation des produits vendus", "Transformation aval",
        Scope3Direction.DOWNSTREAM, TECHNICAL, [
            _sub("industrial_processing", "Transformation industrielle", "kWh",
                 actual=_f(0.057, "Base Carbone ADEME - élec France", 20)),
            _sub("assembly", "Assemblage", "heure", technical=_f(2.5, "Estimation technique", 35)),
        ],
    ),
    Scope3Category(
        "use_sold_products", 11, "Utilisation des produits vendus", "Usage produits",
        Scope3Direction.DOWNSTREAM, TECHNICAL, [
            _sub("electricity_consumption", "Consommation électrique", "kWh.an", actual=_f(0.057, _ADEME, 15)),
            _sub("fuel_consumption", "Consommation carburant", "litre",
                 actual=_f(2.68, "Base Carbone ADEME - diesel", 10)),
            _sub("gas_consumption", "Consommation gaz", "kWh PCI", actual=_f(0.227, _ADEME, 10)),
            _sub("direct_emissions", "Émissions directes d'utilisation", "kgCO2e",
                 actual=_f(1, "Mesure directe", 20)),
        ],
    ),
    Scope3Category(
        "end_of_life", 12, "Fin de vie des produits vendus", "Fin de vie",
        Scope3Direction.DOWNSTREAM, TECHNICAL, [
            _sub("product_recycling", "Recyclage des produits", "kg", actual=_f(0.025, _ADEME, 25)),
            _sub("product_incineration", "Incinération des produits", "kg", actual=_f(0.78, _ADEME, 25)),
            _sub("product_landfill", "Enfouissement des produits", "kg", actual=_f(0.48, _ADEME, 30)),
            _sub("packaging_end_of_life", "Fin de vie des emballages", "kg",
                 actual=_f(0.35, "Base Carbone ADEME - mix", 30)),
        ],
    ),
    Scope3Category(
        "downstream_leased_assets", 13, "Actifs loués aval", "Locations aval",
        Scope3Direction.DOWNSTREAM, ACTUAL, [
            _sub("rented_buildings", "Bâtiments loués", "m².an",
                 actual=_f(25, "ADEME - bureau tertiaire moyen", 25)),
            _sub("rented_vehicles", "Véhicules loués à des tiers", "km", actual=_f(0.193, _ADEME, 20)),
            _sub("rented_equipment", "Équipements loués à des tiers", "kWh",
                 actual=_f(0.057, "Base Carbone ADEME - élec France", 25)),
        ],
    ),
    Scope3Category(
        "franchises", 14, "Franchises", "Franchises",
        Scope3Direction.DOWNSTREAM, ACTUAL, [
            _sub("franchise_energy", "Énergie des franchises", "kWh",
                 actual=_f(0.057, "Base Carbone ADEME - élec France", 20)),
            _sub("franchise_surface", "Surface des franchises", "m²",
                 technical=_f(45, "ADEME - commerce", 30)),
            _sub("franchise_revenue", "Chiffre d'affaires franchises", "€",
                 monetary=_f(0.15, "Estimation sectorielle", 35)),
        ],
    ),
    Scope3Category(
        "investments", 15, "Investissements financiers", "Investissements",
        Scope3Direction.DOWNSTREAM, MONETARY, [
            _sub("equity_listed", "Actions cotées", "M€",
                 monetary=_f(120 * _TONNES_TO_KG, "PCAF - moyenne actions", 35, "M€")),
            _sub("equity_private", "Actions non cotées", "M€",
                 monetary=_f(150 * _TONNES_TO_KG, "PCAF - private equity", 40, "M€")),
            _sub("corporate_bonds", "Obligations d'entreprises", "M€",
                 monetary=_f(85 * _TONNES_TO_KG, "PCAF - obligations", 35, "M€")),
            _sub("sovereign_bonds", "Obligations souveraines", "M€",
                 monetary=_f(45 * _TONNES_TO_KG, "PCAF - souverain", 30, "M€")),
            _sub("project_finance", "Financement de projets", "M€",
                 monetary=_f(180 * _TONNES_TO_KG, "PCAF - project finance", 40, "M€")),
            _sub("real_estate", "Immobilier", "m²",
                 actual=_f(25, "ADEME - tertiaire moyen", 25)),
        ],
    ),
]

_BY_ID: dict[str, Scope3Category] = {c.id: c for c in SCOPE3_CATEGORIES}


def get_category(category_id: str) -> Optional[Scope3Category]:
    return _BY_ID.get(category_id)


def get_category_by_number(number: int) -> Optional[Scope3Category]:
    for category in SCOPE3_CATEGORIES:
        if category.number == number:
            return category
    return None


def get_upstream_categories() -> list[Scope3Category]:
    return [c for c in SCOPE3_CATEGORIES if c.direction is Scope3Direction.UPSTREAM]


def get_downstream_categories() -> list[Scope3Category]:
    return [c for c in SCOPE3_CATEGORIES if c.direction is Scope3Direction.DOWNSTREAM]


def resolve_method(
    category: Scope3Category,
    subcategory: Scope3Subcategory,
    method: Optional[CalculationMethod] = None,
) -> CalculationMethod:
    """Pick the calculation method for an advanced entry.

    An explicit method must be offered by the subcategory. Otherwise the
    category default is used when available, else the subcategory's first
    method.
    """
    if method is not None:
        method = CalculationMethod(method)
        if method not in subcategory.factors:
            raise UnknownFactor(Scope.SCOPE_3, category.id, subcategory.id, method)
        return method
    if category.default_method in subcategory.factors:
        return category.default_method
    return next(iter(subcategory.factors))


def lookup_advanced(
    category_id: str,
    subcategory_id: str,
    method: Optional[CalculationMethod] = None,
) -> FactorEntry:
    """Return the advanced-mode factor for a category/subcategory/method."""
    category = get_category(category_id)
    subcategory = category.get_subcategory(subcategory_id) if category else None
    if category is None or subcategory is None:
        raise UnknownFactor(Scope.SCOPE_3, category_id, subcategory_id, method)

    chosen = resolve_method(category, subcategory, method)
    method_factor = subcategory.factors[chosen]
    return FactorEntry(
        scope=Scope.SCOPE_3,
        category=category.id,
        subcategory=subcategory.id,
        unit=subcategory.quantity_unit(chosen),
        factor=method_factor.value,
        label=f"Cat. {category.number} - {subcategory.name}",
        source=method_factor.source,
        uncertainty=method_factor.uncertainty,
        method=chosen,
    )


def advanced_units() -> set[str]:
    units: set[str] = set()
    for category in SCOPE3_CATEGORIES:
        for sub in category.subcategories:
            for method in sub.factors:
                units.add(sub.quantity_unit(method))
    return units
