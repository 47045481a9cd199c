"""Unit normalization: bring a user-entered quantity into the factor's unit."""

from __future__ import annotations

import math
from typing import Iterable, Mapping, Optional

from .errors import InvalidQuantity, UnsupportedUnit

# (input unit, factor unit) -> multiplier
DEFAULT_CONVERSIONS: dict[tuple[str, str], float] = {
    # Energy
    ("MWh", "kWh"): 1000.0,
    ("MWh", "kWh PCI"): 1000.0,
    ("GJ", "kWh"): 277.78,
    ("GJ", "kWh PCI"): 277.78,
    ("TJ", "kWh"): 277780.0,
    ("thermie", "kWh"): 1.163,
    ("tep", "kWh"): 11630.0,
    ("BTU", "kWh"): 0.000293,
    ("kWh PCS", "kWh PCI"): 0.9,
    # Volume
    ("m3", "litre"): 1000.0,
    ("gallon_us", "litre"): 3.785,
    ("gallon_uk", "litre"): 4.546,
    # Mass
    ("tonne", "kg"): 1000.0,
    ("t", "kg"): 1000.0,
    ("lb", "kg"): 0.4536,
    ("g", "kg"): 0.001,
    # Distance
    ("1000km", "km"): 1000.0,
    ("mile", "km"): 1.609,
    ("nm", "km"): 1.852,
    # Money
    ("k€", "€"): 1000.0,
    ("€", "M€"): 0.000001,
    ("k€", "M€"): 0.001,
}


def conversion_units(conversion_table: Mapping[tuple[str, str], float]) -> set[str]:
    """Every unit that appears on either side of a conversion table."""
    units: set[str] = set()
    for source, target in conversion_table:
        units.add(source)
        units.add(target)
    return units


def validate_quantity(raw_quantity: object) -> float:
    """Coerce to float, rejecting negative, NaN and infinite values."""
    try:
        quantity = float(raw_quantity)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise InvalidQuantity(raw_quantity) from None
    if math.isnan(quantity) or math.isinf(quantity) or quantity < 0:
        raise InvalidQuantity(raw_quantity)
    return quantity


def normalize(
    raw_quantity: float,
    input_unit: str,
    factor_unit: str,
    conversion_table: Optional[Mapping[tuple[str, str], float]] = None,
    known_units: Optional[Iterable[str]] = None,
) -> float:
    """Convert ``raw_quantity`` from ``input_unit`` into ``factor_unit``.

    Pairs missing from the conversion table are treated as already in the
    factor's unit. When ``known_units`` is given, an input unit outside that
    set and outside the table raises UnsupportedUnit.
    """
    if conversion_table is None:
        conversion_table = DEFAULT_CONVERSIONS

    quantity = validate_quantity(raw_quantity)

    if not input_unit or input_unit == factor_unit:
        return quantity

    if known_units is not None:
        recognised = set(known_units) | conversion_units(conversion_table)
        if input_unit not in recognised:
            raise UnsupportedUnit(input_unit)

    multiplier = conversion_table.get((input_unit, factor_unit))
    if multiplier is None:
        return quantity
    return quantity * multiplier
