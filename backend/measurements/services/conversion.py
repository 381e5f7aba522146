"""
Unit conversion service.

Converts quantities between measurement units, bridging container units
(packs, boxes) to their base unit through per-material pack information.
Arithmetic is exact Decimal multiplication and division; values are only
rounded by the format_* helpers at display time.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import List, Optional

from core_backend.exceptions import ValidationError
from core_backend.utils.decimals import parse_decimal
from measurements.exceptions import UnitMismatchError
from measurements.models import CONTAINER_UNITS, MeasurementUnit, UnitCategory
from measurements.services.units import (
    COST_PER_BASE_UNIT_DECIMALS,
    UNIT_DEFINITIONS,
    UNIT_STRING_MAPPINGS,
    units_in_category,
)

logger = logging.getLogger(__name__)

DECIMAL_PRECISION = 28


@dataclass(frozen=True)
class PackInfo:
    """Size of one pack/box of a material, expressed in its base unit."""
    pack_unit: str
    base_unit: str
    units_per_pack: Decimal


@dataclass(frozen=True)
class GuardedValue:
    """
    A figure computed under the guarded-default policy.

    When an input needed for the figure is missing or invalid, a safe
    substitute is used instead of failing; ``is_approximate`` tells callers
    the value should not be trusted as exact.
    """
    value: Decimal
    is_approximate: bool = False
    warning: Optional[str] = None


class UnitConversionService:
    """
    Service for converting quantities between units.

    Supports:
    - Same-category conversions through the static factor table
    - Pack/box to base unit (and back) through PackInfo
    - Material-aware conversions into a material's holding unit
    - Per-base-unit cost derivation with guarded defaults
    """

    def parse_unit(self, value) -> MeasurementUnit:
        """
        Map a unit string to a MeasurementUnit.

        Accepts canonical values ("grams") and common variations ("g", "Kilograms").

        Raises:
            ValidationError: If the string matches no known unit.
        """
        if isinstance(value, MeasurementUnit):
            return value
        if value is None or not str(value).strip():
            raise ValidationError("Unit is required", field="unit")

        normalized = str(value).strip().lower()
        try:
            return MeasurementUnit(normalized)
        except ValueError:
            pass

        unit = UNIT_STRING_MAPPINGS.get(normalized)
        if unit is None:
            raise ValidationError(f"Unknown unit '{value}'", field="unit")
        return unit

    def get_category(self, unit) -> UnitCategory:
        unit = self.parse_unit(unit)
        return UNIT_DEFINITIONS[unit]["category"]

    def get_pack_info(self, material) -> Optional[PackInfo]:
        """
        Pack information for a PACKS/BOXES material, or None for other materials.

        Raises:
            ValidationError: If the material is a container unit but lacks a
                base unit or a positive units_per_pack.
        """
        unit = self.parse_unit(material.unit)
        if unit not in CONTAINER_UNITS:
            return None

        if not material.base_unit:
            raise ValidationError(
                f"Material '{material.name}' is measured in {unit} but has no base unit",
                field="base_unit",
                details={"material_id": material.pk},
            )
        if material.units_per_pack is None or material.units_per_pack <= 0:
            raise ValidationError(
                f"Material '{material.name}' is measured in {unit} but has no positive units per pack",
                field="units_per_pack",
                details={"material_id": material.pk},
            )

        return PackInfo(
            pack_unit=unit,
            base_unit=self.parse_unit(material.base_unit),
            units_per_pack=Decimal(str(material.units_per_pack)),
        )

    def holding_unit(self, material) -> MeasurementUnit:
        """
        The unit a material is held, consumed and costed in.

        Base unit for PACKS/BOXES materials, the material's own unit otherwise.
        """
        unit = self.parse_unit(material.unit)
        if unit in CONTAINER_UNITS:
            if not material.base_unit:
                raise ValidationError(
                    f"Material '{material.name}' is measured in {unit} but has no base unit",
                    field="base_unit",
                    details={"material_id": material.pk},
                )
            return self.parse_unit(material.base_unit)
        return unit

    def convert(
        self,
        value,
        from_unit,
        to_unit,
        pack_info: Optional[PackInfo] = None,
    ) -> Decimal:
        """
        Convert a quantity from one unit to another.

        Args:
            value: The quantity to convert.
            from_unit: The source unit.
            to_unit: The target unit.
            pack_info: Required when either unit is PACKS/BOXES.

        Returns:
            The converted quantity, unrounded.

        Raises:
            UnitMismatchError: If the units share no category and no pack bridge applies.
            ValidationError: If a unit is unknown.
        """
        from_unit = self.parse_unit(from_unit)
        to_unit = self.parse_unit(to_unit)
        value = parse_decimal(value, "value")

        # Same unit, no conversion needed
        if from_unit == to_unit:
            return value

        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION

            if from_unit in CONTAINER_UNITS or to_unit in CONTAINER_UNITS:
                return self._convert_container(value, from_unit, to_unit, pack_info)

            from_def = UNIT_DEFINITIONS[from_unit]
            to_def = UNIT_DEFINITIONS[to_unit]
            if from_def["category"] != to_def["category"]:
                raise UnitMismatchError(from_unit, to_unit)

            return value * from_def["factor"] / to_def["factor"]

    def _convert_container(self, value, from_unit, to_unit, pack_info):
        if pack_info is None or pack_info.units_per_pack <= 0:
            raise UnitMismatchError(
                from_unit,
                to_unit,
                message=f"Converting between '{from_unit}' and '{to_unit}' requires pack information",
            )

        if from_unit == pack_info.pack_unit and to_unit == pack_info.base_unit:
            return value * pack_info.units_per_pack
        if from_unit == pack_info.base_unit and to_unit == pack_info.pack_unit:
            return value / pack_info.units_per_pack

        raise UnitMismatchError(from_unit, to_unit)

    def is_convertible(self, from_unit, to_unit, pack_info: Optional[PackInfo] = None) -> bool:
        try:
            self.convert(Decimal("1"), from_unit, to_unit, pack_info)
        except UnitMismatchError:
            return False
        return True

    def convert_for_material(self, quantity, from_unit, to_unit, material) -> Decimal:
        """
        Convert between any two units meaningful for a material.

        Chains through the material's base unit when one side is its pack
        unit, so e.g. packs of flour convert to kilograms when the pack's
        base unit is grams.
        """
        from_unit = self.parse_unit(from_unit)
        to_unit = self.parse_unit(to_unit)
        quantity = parse_decimal(quantity, "quantity")

        if from_unit == to_unit:
            return quantity

        pack_info = self.get_pack_info(material)

        if pack_info is None:
            if from_unit in CONTAINER_UNITS or to_unit in CONTAINER_UNITS:
                raise UnitMismatchError(from_unit, to_unit, material=material)
            try:
                return self.convert(quantity, from_unit, to_unit)
            except UnitMismatchError:
                raise UnitMismatchError(from_unit, to_unit, material=material)

        try:
            if from_unit in CONTAINER_UNITS:
                base_quantity = self.convert(quantity, from_unit, pack_info.base_unit, pack_info)
                if to_unit in CONTAINER_UNITS:
                    return self.convert(base_quantity, pack_info.base_unit, to_unit, pack_info)
                return self.convert(base_quantity, pack_info.base_unit, to_unit)

            if to_unit in CONTAINER_UNITS:
                base_quantity = self.convert(quantity, from_unit, pack_info.base_unit)
                return self.convert(base_quantity, pack_info.base_unit, to_unit, pack_info)

            return self.convert(quantity, from_unit, to_unit)
        except UnitMismatchError:
            raise UnitMismatchError(from_unit, to_unit, material=material)

    def to_holding_units(self, quantity, unit, material) -> Decimal:
        """Convert a quantity in any compatible unit into the material's holding unit."""
        return self.convert_for_material(quantity, unit, self.holding_unit(material), material)

    def effective_unit_cost(self, material) -> GuardedValue:
        """
        Cost of one holding unit of a material.

        ``unit_cost / units_per_pack`` for PACKS/BOXES materials, otherwise
        ``unit_cost`` unchanged. A missing or non-positive units_per_pack is
        replaced by 1 and the result is flagged approximate.
        """
        unit_cost = Decimal(str(material.unit_cost or 0))
        unit = self.parse_unit(material.unit)

        if unit not in CONTAINER_UNITS:
            return GuardedValue(unit_cost)

        units_per_pack = material.units_per_pack
        if units_per_pack is None or units_per_pack <= 0:
            warning = (
                f"Material '{material.name}' has invalid units_per_pack ({units_per_pack}); "
                f"using 1 for cost per base unit"
            )
            logger.warning(warning)
            return GuardedValue(unit_cost, is_approximate=True, warning=warning)

        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            return GuardedValue(unit_cost / Decimal(str(units_per_pack)))

    def get_available_units(self, material) -> List[MeasurementUnit]:
        """
        Units a quantity of this material may be entered in.

        The material's own unit, its base unit if present, and every unit of
        the same category; never units from another category.
        """
        units = [self.parse_unit(material.unit)]
        if material.base_unit:
            units.append(self.parse_unit(material.base_unit))

        available = []
        for unit in units:
            if unit not in available:
                available.append(unit)
            category = UNIT_DEFINITIONS[unit]["category"]
            if category == UnitCategory.CONTAINER:
                continue
            for same_category_unit in units_in_category(category):
                if same_category_unit not in available:
                    available.append(same_category_unit)
        return available

    def round_for_display(self, value, unit) -> Decimal:
        """Round a quantity with the decimals its unit is displayed with."""
        unit = self.parse_unit(unit)
        decimals = UNIT_DEFINITIONS[unit]["decimals"]
        return _quantize(value, decimals)

    def format_quantity(self, value, unit) -> str:
        unit = self.parse_unit(unit)
        return f"{self.round_for_display(value, unit)} {UNIT_DEFINITIONS[unit]['symbol']}"

    def format_cost_per_base_unit(self, value) -> str:
        return str(_quantize(value, COST_PER_BASE_UNIT_DECIMALS))


def _quantize(value, decimals):
    exponent = Decimal("1") if decimals == 0 else Decimal(1).scaleb(-decimals)
    return Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP)
