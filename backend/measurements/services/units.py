"""
Static unit table for measurements.

Each unit maps to its category, a factor relative to the smallest unit of
that category, and the number of decimals used when the value is displayed.
Container units carry no factor.
"""
from decimal import Decimal

from measurements.models import MeasurementUnit, UnitCategory


UNIT_DEFINITIONS = {
    # Weight units (factor relative to grams)
    MeasurementUnit.GRAMS: {"category": UnitCategory.WEIGHT, "factor": Decimal("1"), "decimals": 0, "symbol": "g"},
    MeasurementUnit.KILOGRAMS: {"category": UnitCategory.WEIGHT, "factor": Decimal("1000"), "decimals": 1, "symbol": "kg"},

    # Volume units (factor relative to milliliters)
    MeasurementUnit.MILLILITERS: {"category": UnitCategory.VOLUME, "factor": Decimal("1"), "decimals": 0, "symbol": "ml"},
    MeasurementUnit.LITERS: {"category": UnitCategory.VOLUME, "factor": Decimal("1000"), "decimals": 1, "symbol": "l"},

    # Count units
    MeasurementUnit.PIECES: {"category": UnitCategory.COUNT, "factor": Decimal("1"), "decimals": 0, "symbol": "pcs"},
    MeasurementUnit.BOTTLES: {"category": UnitCategory.COUNT, "factor": Decimal("1"), "decimals": 0, "symbol": "btl"},

    # Length units (factor relative to centimeters)
    MeasurementUnit.CENTIMETERS: {"category": UnitCategory.LENGTH, "factor": Decimal("1"), "decimals": 0, "symbol": "cm"},
    MeasurementUnit.METERS: {"category": UnitCategory.LENGTH, "factor": Decimal("100"), "decimals": 1, "symbol": "m"},

    # Area units (factor relative to square centimeters)
    MeasurementUnit.SQUARE_CENTIMETERS: {"category": UnitCategory.AREA, "factor": Decimal("1"), "decimals": 0, "symbol": "cm²"},
    MeasurementUnit.SQUARE_METERS: {"category": UnitCategory.AREA, "factor": Decimal("10000"), "decimals": 1, "symbol": "m²"},

    # Container units - size comes from the material
    MeasurementUnit.PACKS: {"category": UnitCategory.CONTAINER, "factor": None, "decimals": 1, "symbol": "packs"},
    MeasurementUnit.BOXES: {"category": UnitCategory.CONTAINER, "factor": None, "decimals": 1, "symbol": "boxes"},
}

# Decimals for derived per-base-unit costs
COST_PER_BASE_UNIT_DECIMALS = 4


# Mapping of common unit string variations to canonical units
# Used when importing catalogs or accepting free-text units from clients
UNIT_STRING_MAPPINGS = {
    # Weight - grams
    "g": MeasurementUnit.GRAMS,
    "gr": MeasurementUnit.GRAMS,
    "gram": MeasurementUnit.GRAMS,
    "grams": MeasurementUnit.GRAMS,
    # Weight - kilograms
    "kg": MeasurementUnit.KILOGRAMS,
    "kgs": MeasurementUnit.KILOGRAMS,
    "kilo": MeasurementUnit.KILOGRAMS,
    "kilos": MeasurementUnit.KILOGRAMS,
    "kilogram": MeasurementUnit.KILOGRAMS,
    "kilograms": MeasurementUnit.KILOGRAMS,
    # Volume - milliliters
    "ml": MeasurementUnit.MILLILITERS,
    "milliliter": MeasurementUnit.MILLILITERS,
    "milliliters": MeasurementUnit.MILLILITERS,
    "millilitre": MeasurementUnit.MILLILITERS,
    "millilitres": MeasurementUnit.MILLILITERS,
    # Volume - liters
    "l": MeasurementUnit.LITERS,
    "liter": MeasurementUnit.LITERS,
    "liters": MeasurementUnit.LITERS,
    "litre": MeasurementUnit.LITERS,
    "litres": MeasurementUnit.LITERS,
    # Count
    "pc": MeasurementUnit.PIECES,
    "pcs": MeasurementUnit.PIECES,
    "piece": MeasurementUnit.PIECES,
    "pieces": MeasurementUnit.PIECES,
    "each": MeasurementUnit.PIECES,
    "ea": MeasurementUnit.PIECES,
    "bottle": MeasurementUnit.BOTTLES,
    "bottles": MeasurementUnit.BOTTLES,
    # Containers
    "pack": MeasurementUnit.PACKS,
    "packs": MeasurementUnit.PACKS,
    "box": MeasurementUnit.BOXES,
    "boxes": MeasurementUnit.BOXES,
    # Length
    "m": MeasurementUnit.METERS,
    "meter": MeasurementUnit.METERS,
    "meters": MeasurementUnit.METERS,
    "cm": MeasurementUnit.CENTIMETERS,
    "centimeter": MeasurementUnit.CENTIMETERS,
    "centimeters": MeasurementUnit.CENTIMETERS,
    # Area
    "m2": MeasurementUnit.SQUARE_METERS,
    "m²": MeasurementUnit.SQUARE_METERS,
    "sqm": MeasurementUnit.SQUARE_METERS,
    "square_meters": MeasurementUnit.SQUARE_METERS,
    "square meters": MeasurementUnit.SQUARE_METERS,
    "cm2": MeasurementUnit.SQUARE_CENTIMETERS,
    "cm²": MeasurementUnit.SQUARE_CENTIMETERS,
    "square_centimeters": MeasurementUnit.SQUARE_CENTIMETERS,
    "square centimeters": MeasurementUnit.SQUARE_CENTIMETERS,
}


def units_in_category(category):
    """All units of a category, smallest first."""
    units = [
        unit for unit, definition in UNIT_DEFINITIONS.items()
        if definition["category"] == category
    ]
    return sorted(units, key=lambda unit: UNIT_DEFINITIONS[unit]["factor"] or Decimal("0"))
