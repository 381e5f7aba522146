"""
Measurements app - shared unit definitions.

Units are a closed enumeration rather than a table: every service validates
unit values against MeasurementUnit at its boundary, and a gram is a gram
everywhere. Conversion factors live in measurements.services.units.
"""
from django.db import models
from django.utils.translation import gettext_lazy as _


class UnitCategory(models.TextChoices):
    """Categories for measurement units."""
    WEIGHT = "weight", _("Weight")
    VOLUME = "volume", _("Volume")
    COUNT = "count", _("Count")
    LENGTH = "length", _("Length")
    AREA = "area", _("Area")
    CONTAINER = "container", _("Container")


class MeasurementUnit(models.TextChoices):
    """
    Units a raw material can be purchased, held or used in.

    PACKS and BOXES are container units: their size is per-material data
    (base_unit + units_per_pack on RawMaterial), so they never convert
    through the static factor table.
    """
    KILOGRAMS = "kg", _("Kilograms")
    GRAMS = "grams", _("Grams")
    LITERS = "liters", _("Liters")
    MILLILITERS = "ml", _("Milliliters")
    PIECES = "pieces", _("Pieces")
    BOTTLES = "bottles", _("Bottles")
    PACKS = "packs", _("Packs")
    BOXES = "boxes", _("Boxes")
    METERS = "meters", _("Meters")
    CENTIMETERS = "centimeters", _("Centimeters")
    SQUARE_METERS = "square_meters", _("Square Meters")
    SQUARE_CENTIMETERS = "square_centimeters", _("Square Centimeters")


CONTAINER_UNITS = frozenset({MeasurementUnit.PACKS, MeasurementUnit.BOXES})
