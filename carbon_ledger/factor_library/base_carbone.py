"""Standard emission factor catalog (Base Carbone ADEME, kg CO2e per unit).

Importing this module registers every factor in the catalog.
"""

from carbon_ledger.factor_library.registry import register_factor

# (scope, category, subcategory, unit, factor, label)
_BASE_CARBONE = [
    # Scope 1 -- liquid fuels
    (1, "combustibles", "diesel", "litre", 2.68, "Gazole/Diesel"),
    (1, "combustibles", "essence", "litre", 2.31, "Essence"),
    (1, "combustibles", "fioulLourd", "litre", 3.17, "Fioul lourd"),
    (1, "combustibles", "fioulDomestique", "litre", 2.69, "Fioul domestique"),
    (1, "combustibles", "gpl", "litre", 1.64, "GPL"),
    # gaseous fuels
    (1, "combustibles", "gazNaturel", "kWh PCI", 0.227, "Gaz naturel"),
    (1, "combustibles", "propane", "kg", 2.94, "Propane"),
    (1, "combustibles", "butane", "kg", 2.93, "Butane"),
    # solid fuels
    (1, "combustibles", "charbon", "kg", 2.42, "Charbon"),
    (1, "combustibles", "coke", "kg", 3.11, "Coke de pétrole"),
    (1, "combustibles", "lignite", "kg", 1.17, "Lignite"),
    # biomass
    (1, "combustibles", "boisBuche", "kg", 0.013, "Bois bûche"),
    (1, "combustibles", "granulesBois", "kg", 0.024, "Granulés de bois"),
    (1, "combustibles", "plaquettesBois", "kg", 0.015, "Plaquettes de bois"),
    # refrigerant leaks (GWP)
    (1, "refrigerants", "r134a", "kg", 1430, "R-134a (Tétrafluoroéthane)"),
    (1, "refrigerants", "r404a", "kg", 3922, "R-404A"),
    (1, "refrigerants", "r410a", "kg", 2088, "R-410A"),
    (1, "refrigerants", "r407c", "kg", 1774, "R-407C"),
    (1, "refrigerants", "r32", "kg", 675, "R-32"),
    (1, "refrigerants", "r11", "kg", 4750, "R-11 (CFC-11)"),
    (1, "refrigerants", "r12", "kg", 10900, "R-12 (CFC-12)"),
    (1, "refrigerants", "r22", "kg", 1810, "R-22 (HCFC-22)"),
    # owned vehicles
    (1, "vehicules", "voitureEssence", "km", 0.193, "Voiture essence (moyenne)"),
    (1, "vehicules", "voitureDiesel", "km", 0.166, "Voiture diesel (moyenne)"),
    (1, "vehicules", "voitureElectrique", "km", 0.020, "Voiture électrique"),
    (1, "vehicules", "voitureHybride", "km", 0.110, "Voiture hybride"),
    (1, "vehicules", "utilitaireDiesel", "km", 0.218, "Véhicule utilitaire diesel"),
    (1, "vehicules", "utilitaireEssence", "km", 0.251, "Véhicule utilitaire essence"),
    (1, "vehicules", "camion12t", "km", 0.390, "Camion 12-14t"),
    (1, "vehicules", "camion20t", "km", 0.580, "Camion 16-32t"),
    (1, "vehicules", "camion40t", "km", 0.790, "Camion >32t"),
    (1, "vehicules", "tracteurAgricole", "heure", 12.5, "Tracteur agricole"),
    (1, "vehicules", "chariotElevateur", "heure", 8.2, "Chariot élévateur"),
    # Scope 2 -- electricity by country mix
    (2, "electricite", "france", "kWh", 0.057, "Électricité France (mix national)"),
    (2, "electricite", "allemagne", "kWh", 0.401, "Électricité Allemagne"),
    (2, "electricite", "espagne", "kWh", 0.256, "Électricité Espagne"),
    (2, "electricite", "italie", "kWh", 0.359, "Électricité Italie"),
    (2, "electricite", "royaumeUni", "kWh", 0.233, "Électricité Royaume-Uni"),
    (2, "electricite", "moyenneEurope", "kWh", 0.276, "Électricité moyenne européenne"),
    (2, "electricite", "solaire", "kWh", 0.044, "Électricité solaire"),
    (2, "electricite", "eolien", "kWh", 0.015, "Électricité éolienne"),
    (2, "electricite", "hydraulique", "kWh", 0.006, "Électricité hydraulique"),
    # steam and district heating
    (2, "vapeur", "vapeurIndustrielle", "kWh", 0.090, "Vapeur industrielle"),
    (2, "vapeur", "eauChaude", "kWh", 0.227, "Eau chaude (réseau de chaleur)"),
    # Scope 3 -- freight
    (3, "transport", "routierPoidsMoyen", "t.km", 0.171, "Transport routier poids moyen"),
    (3, "transport", "routierPoidsLourd", "t.km", 0.111, "Transport routier poids lourd"),
    (3, "transport", "ferroviaire", "t.km", 0.033, "Transport ferroviaire"),
    (3, "transport", "maritime", "t.km", 0.015, "Transport maritime"),
    (3, "transport", "aerien", "t.km", 1.47, "Transport aérien cargo"),
    (3, "transport", "fluvial", "t.km", 0.037, "Transport fluvial"),
    # passenger travel
    (3, "transport", "avionCourtCourrier", "passager.km", 0.230, "Avion court-courrier"),
    (3, "transport", "avionMoyenCourrier", "passager.km", 0.187, "Avion moyen-courrier"),
    (3, "transport", "avionLongCourrier", "passager.km", 0.152, "Avion long-courrier"),
    (3, "transport", "tgv", "passager.km", 0.0032, "TGV"),
    (3, "transport", "ter", "passager.km", 0.0295, "TER"),
    (3, "transport", "metro", "passager.km", 0.0038, "Métro"),
    (3, "transport", "bus", "passager.km", 0.103, "Bus"),
    (3, "transport", "tramway", "passager.km", 0.0044, "Tramway"),
    # materials
    (3, "materiaux", "acier", "kg", 1.46, "Acier"),
    (3, "materiaux", "aluminium", "kg", 8.24, "Aluminium primaire"),
    (3, "materiaux", "beton", "kg", 0.152, "Béton"),
    (3, "materiaux", "ciment", "kg", 0.918, "Ciment"),
    (3, "materiaux", "bois", "kg", 0.72, "Bois (construction)"),
    (3, "materiaux", "verre", "kg", 0.85, "Verre plat"),
    (3, "materiaux", "plastiquePET", "kg", 2.28, "Plastique PET"),
    (3, "materiaux", "plastiquePP", "kg", 1.95, "Plastique PP"),
    (3, "materiaux", "papier", "kg", 0.92, "Papier/carton"),
    (3, "materiaux", "cuivre", "kg", 4.20, "Cuivre"),
    # waste treatment
    (3, "dechets", "incineration", "kg", 0.78, "Incinération avec récupération d'énergie"),
    (3, "dechets", "enfouissement", "kg", 0.48, "Enfouissement"),
    (3, "dechets", "recyclage", "kg", 0.025, "Recyclage"),
    (3, "dechets", "compostage", "kg", 0.015, "Compostage"),
    (3, "dechets", "methanisation", "kg", 0.022, "Méthanisation"),
    # food
    (3, "alimentation", "boeuf", "kg", 25.2, "Bœuf"),
    (3, "alimentation", "porc", "kg", 4.6, "Porc"),
    (3, "alimentation", "agneau", "kg", 22.9, "Agneau"),
    (3, "alimentation", "volaille", "kg", 2.9, "Volaille"),
    (3, "alimentation", "poisson", "kg", 5.1, "Poisson"),
    (3, "alimentation", "lait", "litre", 1.32, "Lait"),
    (3, "alimentation", "fromage", "kg", 8.5, "Fromage"),
    (3, "alimentation", "oeuf", "kg", 1.8, "Œufs"),
    (3, "alimentation", "legumes", "kg", 0.4, "Légumes"),
    (3, "alimentation", "fruits", "kg", 0.6, "Fruits"),
    (3, "alimentation", "cereales", "kg", 1.1, "Céréales"),
    # digital
    (3, "numerique", "emailSimple", "email", 0.004, "Email simple"),
    (3, "numerique", "emailPieceJointe", "email", 0.035, "Email avec pièce jointe"),
    (3, "numerique", "rechercheWeb", "recherche", 0.007, "Recherche web"),
    (3, "numerique", "streamingVideo", "heure", 0.036, "Streaming vidéo HD"),
    (3, "numerique", "visioconference", "heure", 0.150, "Visioconférence"),
    (3, "numerique", "stockageCloud", "Go.an", 0.5, "Stockage cloud"),
]

for _scope, _category, _subcategory, _unit, _factor, _label in _BASE_CARBONE:
    register_factor(_scope, _category, _subcategory, _unit, _factor, _label)
