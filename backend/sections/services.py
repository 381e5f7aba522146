"""
Section inventory management.

Sections draw stock from the central ledger and consume it. Holdings are
kept in each material's holding unit (base unit for pack/box materials) so
repeated pack/base conversions never accumulate rounding error. Every
operation that moves stock runs in one transaction with the affected
holding rows locked.
"""
from datetime import timedelta
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP, ROUND_UP

from django.db import transaction
from django.utils import timezone

from core_backend.exceptions import ValidationError
from core_backend.utils.decimals import parse_decimal
from inventory.exceptions import InsufficientStockError
from inventory.models import LEDGER_QUANTITY, QUANTITY_PLACES, MovementType
from inventory.services import StockLedger
from materials.models import RawMaterial
from measurements.services import UnitConversionService
from .exceptions import AggregateInsufficientStockError
from .models import ConsumptionReason, Section, SectionConsumption, SectionInventory
import logging

logger = logging.getLogger(__name__)


class SectionInventoryManager:

    @staticmethod
    def _to_positive_decimal(value, field):
        value = parse_decimal(value, field, places=QUANTITY_PLACES)
        if value <= 0:
            raise ValidationError(f"{field} must be greater than zero", field=field)
        return value

    @staticmethod
    def _ledger_quantity(holding_quantity, material, conversion, rounding=ROUND_DOWN):
        """
        Convert a holding quantity into a ledger quantity.

        The ledger keeps six decimal places of purchase units, so 5 bottles
        of a 12-bottle box cannot be recorded exactly. The purchase quantity
        is rounded to the ledger's precision and the holding quantity it
        really covers is returned with it; callers move only that amount.

        Returns:
            (purchase_quantity, covered_holding_quantity)
        """
        purchase_quantity = conversion.convert_for_material(
            holding_quantity, conversion.holding_unit(material), material.unit, material
        ).quantize(LEDGER_QUANTITY, rounding=rounding)
        return purchase_quantity, conversion.to_holding_units(purchase_quantity, material.unit, material)

    @staticmethod
    def _get_section(section_id) -> Section:
        section = Section.all_objects.filter(pk=section_id).first()
        if section is None:
            raise ValidationError(f"Section {section_id} does not exist", field="section")
        if not section.is_active:
            raise ValidationError(f"Section '{section.name}' is archived", field="section")
        return section

    @staticmethod
    def _get_material(material_id) -> RawMaterial:
        material = RawMaterial.all_objects.filter(pk=material_id).first()
        if material is None:
            raise ValidationError(f"Raw material {material_id} does not exist", field="material")
        return material

    @staticmethod
    def _lock_holding(section, material):
        return (
            SectionInventory.objects.select_for_update()
            .filter(section=section, material=material)
            .first()
        )

    @staticmethod
    @transaction.atomic
    def assign_stock(section_id, material_id, quantity_in_purchase_units, assigned_by, notes: str = ""):
        """
        Move stock from the central ledger into a section.

        The quantity is given in the material's purchase unit (e.g. packs) and
        stored in the section in holding units (e.g. grams). The ledger is
        debited with an OUT movement referencing the section.

        Raises:
            ValidationError: For a non-positive quantity, unknown section or material.
            InsufficientStockError: If the ledger cannot cover the request.
        """
        quantity = SectionInventoryManager._to_positive_decimal(quantity_in_purchase_units, "quantity")
        section = SectionInventoryManager._get_section(section_id)
        material = SectionInventoryManager._get_material(material_id)
        if not material.is_active:
            raise ValidationError(f"Cannot assign archived material '{material.name}'", field="material")

        conversion = UnitConversionService()
        holding_quantity = conversion.to_holding_units(quantity, material.unit, material)

        StockLedger.record_movement(
            material=material,
            movement_type=MovementType.OUT,
            quantity=quantity,
            performed_by=assigned_by,
            to_section=section,
            reason=notes or f"Assigned to {section.name}",
            reference_id=f"section:{section.pk}",
        )

        holding = SectionInventoryManager._lock_holding(section, material)
        if holding is None:
            holding = SectionInventory(section=section, material=material)
        holding.quantity += holding_quantity
        holding.updated_by = assigned_by
        holding.save()

        logger.info(
            f"Assigned {quantity} {material.unit} ({holding_quantity} {conversion.holding_unit(material)}) "
            f"of {material.name} to {section.name}; section now holds {holding.quantity}"
        )
        return holding

    @staticmethod
    @transaction.atomic
    def record_consumption(
        section_id,
        material_id,
        quantity_in_base_units,
        consumed_by,
        reason=ConsumptionReason.OTHER,
        order_id=None,
        notes: str = "",
    ) -> SectionConsumption:
        """
        Consume stock held by a section.

        Raises:
            InsufficientStockError: If the quantity exceeds the section's
                unreserved holding. The holding is left unchanged.
        """
        quantity = SectionInventoryManager._to_positive_decimal(quantity_in_base_units, "quantity")
        try:
            reason = ConsumptionReason(reason)
        except ValueError:
            raise ValidationError(f"Unknown consumption reason '{reason}'", field="reason")

        section = SectionInventoryManager._get_section(section_id)
        material = SectionInventoryManager._get_material(material_id)
        holding_unit = UnitConversionService().holding_unit(material)

        holding = SectionInventoryManager._lock_holding(section, material)
        available = holding.available_quantity if holding else Decimal("0")
        if quantity > available:
            logger.warning(
                f"Rejected consumption of {quantity} {holding_unit} of {material.name} "
                f"in {section.name}: only {available} available"
            )
            raise InsufficientStockError(
                material, requested=quantity, available=available, unit=holding_unit, section=section
            )

        holding.quantity -= quantity
        holding.updated_by = consumed_by
        holding.save()

        consumption = SectionConsumption.objects.create(
            section=section,
            material=material,
            quantity=quantity,
            reason=reason,
            order_id=order_id or "",
            notes=notes,
            consumed_by=consumed_by,
        )
        logger.info(
            f"{section.name} consumed {quantity} {holding_unit} of {material.name} ({reason}); "
            f"{holding.quantity} left"
        )
        return consumption

    @staticmethod
    @transaction.atomic
    def record_recipe_consumption(section_id, recipe_id, consumed_by, order_id=None, servings=1, notes: str = ""):
        """
        Consume every ingredient of a recipe from a section, all or nothing.

        Ingredient quantities are converted into each material's holding
        unit and multiplied by ``servings``. Every holding is checked before
        any is debited.

        Returns:
            The SectionConsumption rows written, one per ingredient.

        Raises:
            AggregateInsufficientStockError: Listing every ingredient the
                section cannot cover. Nothing is debited.
        """
        from cogs.models import Recipe

        servings = SectionInventoryManager._to_positive_decimal(servings, "servings")
        section = SectionInventoryManager._get_section(section_id)

        recipe = Recipe.all_objects.filter(pk=recipe_id).first()
        if recipe is None:
            raise ValidationError(f"Recipe {recipe_id} does not exist", field="recipe")
        if not recipe.is_active:
            raise ValidationError(f"Recipe '{recipe.name}' is archived", field="recipe")

        ingredients = list(recipe.ingredients.select_related("material").order_by("position", "pk"))
        if not ingredients:
            raise ValidationError(f"Recipe '{recipe.name}' has no ingredients", field="recipe")

        conversion = UnitConversionService()
        requirements = {}
        for ingredient in ingredients:
            material = ingredient.material
            required = conversion.to_holding_units(ingredient.quantity, ingredient.unit, material) * servings
            if material.pk in requirements:
                requirements[material.pk]["required"] += required
            else:
                requirements[material.pk] = {
                    "material": material,
                    "required": required,
                    "unit": conversion.holding_unit(material),
                }
        for requirement in requirements.values():
            requirement["required"] = requirement["required"].quantize(LEDGER_QUANTITY, rounding=ROUND_HALF_UP)

        holdings = {
            holding.material_id: holding
            for holding in SectionInventory.objects.select_for_update()
            .filter(section=section, material_id__in=list(requirements))
            .order_by("pk")
        }

        failures = []
        for material_id, requirement in requirements.items():
            holding = holdings.get(material_id)
            available = holding.available_quantity if holding else Decimal("0")
            if requirement["required"] > available:
                failures.append({
                    "material_id": material_id,
                    "material_name": requirement["material"].name,
                    "required": requirement["required"],
                    "available": available,
                    "unit": requirement["unit"],
                })

        if failures:
            logger.warning(
                f"Rejected recipe consumption of '{recipe.name}' x{servings} in {section.name}: "
                f"{len(failures)} ingredient(s) short"
            )
            raise AggregateInsufficientStockError(section, failures, recipe=recipe)

        consumptions = []
        for material_id, requirement in requirements.items():
            holding = holdings[material_id]
            holding.quantity -= requirement["required"]
            holding.updated_by = consumed_by
            holding.save()
            consumptions.append(SectionConsumption.objects.create(
                section=section,
                material=requirement["material"],
                quantity=requirement["required"],
                reason=ConsumptionReason.RECIPE,
                order_id=order_id or "",
                recipe=recipe,
                notes=notes,
                consumed_by=consumed_by,
            ))

        logger.info(
            f"{section.name} consumed recipe '{recipe.name}' x{servings} "
            f"({len(consumptions)} ingredients) for order {order_id or '-'}"
        )
        return consumptions

    @staticmethod
    @transaction.atomic
    def update_holding(inventory_id, quantity_in_purchase_units, updated_by, notes: str = ""):
        """
        Set a section holding to a new level, given in purchase units.

        An increase draws the difference from the ledger; a decrease returns
        it. The holding cannot drop below its reserved quantity. When the
        difference is not a whole number of ledger units the holding stops
        just short of the target, by less than one millionth of a pack.
        """
        new_purchase_quantity = parse_decimal(quantity_in_purchase_units, "quantity", places=QUANTITY_PLACES)
        if new_purchase_quantity < 0:
            raise ValidationError("quantity cannot be negative", field="quantity")

        holding = (
            SectionInventory.objects.select_for_update()
            .select_related("section", "material")
            .filter(pk=inventory_id)
            .first()
        )
        if holding is None:
            raise ValidationError(f"Section inventory {inventory_id} does not exist", field="inventory")

        material = holding.material
        conversion = UnitConversionService()
        holding_unit = conversion.holding_unit(material)
        new_quantity = conversion.to_holding_units(new_purchase_quantity, material.unit, material)

        if new_quantity < holding.reserved_quantity:
            raise ValidationError(
                f"Cannot set holding below its reserved quantity ({holding.reserved_quantity} {holding_unit})",
                field="quantity",
            )

        # Round toward the current level so the ledger never moves more than the holding does
        difference = new_quantity - holding.quantity
        purchase_difference, covered = SectionInventoryManager._ledger_quantity(abs(difference), material, conversion)
        if purchase_difference > 0:
            if difference > 0:
                StockLedger.record_movement(
                    material=material,
                    movement_type=MovementType.OUT,
                    quantity=purchase_difference,
                    performed_by=updated_by,
                    to_section=holding.section,
                    reason=notes or f"Holding increased in {holding.section.name}",
                    reference_id=f"section:{holding.section_id}",
                )
            else:
                StockLedger.record_movement(
                    material=material,
                    movement_type=MovementType.TRANSFER,
                    quantity=purchase_difference,
                    performed_by=updated_by,
                    from_section=holding.section,
                    reason=notes or f"Holding reduced in {holding.section.name}",
                    reference_id=f"section:{holding.section_id}",
                )
                covered = -covered
            holding.quantity += covered

        holding.updated_by = updated_by
        holding.save()
        logger.info(f"Set {material.name} in {holding.section.name} to {holding.quantity} {holding_unit}")
        return holding

    @staticmethod
    @transaction.atomic
    def return_stock(inventory_id, returned_by, notes: str = ""):
        """
        Return a section's unreserved holding of a material to the ledger.

        Only whole ledger units go back. For a 12-bottle box, 5 bottles
        return as 0.416666 boxes and the 0.000008 bottles they leave over
        stay in the section.

        Returns:
            The quantity returned, in purchase units.
        """
        holding = (
            SectionInventory.objects.select_for_update()
            .select_related("section", "material")
            .filter(pk=inventory_id)
            .first()
        )
        if holding is None:
            raise ValidationError(f"Section inventory {inventory_id} does not exist", field="inventory")

        returnable = holding.available_quantity
        if returnable <= 0:
            raise ValidationError(
                f"No unreserved {holding.material.name} in {holding.section.name} to return",
                field="inventory",
            )

        material = holding.material
        conversion = UnitConversionService()
        purchase_quantity, covered = SectionInventoryManager._ledger_quantity(returnable, material, conversion)
        if purchase_quantity <= 0:
            raise ValidationError(
                f"Unreserved {material.name} in {holding.section.name} is too small to return to the ledger",
                field="inventory",
                details={"available": str(returnable)},
            )
        StockLedger.record_movement(
            material=material,
            movement_type=MovementType.TRANSFER,
            quantity=purchase_quantity,
            performed_by=returned_by,
            from_section=holding.section,
            reason=notes or f"Returned from {holding.section.name}",
            reference_id=f"section:{holding.section_id}",
        )

        holding.quantity -= covered
        holding.updated_by = returned_by
        holding.save()
        logger.info(
            f"Returned {purchase_quantity} {material.unit} of {material.name} "
            f"from {holding.section.name} to the ledger"
        )
        return purchase_quantity

    @staticmethod
    @transaction.atomic
    def transfer_between_sections(
        from_section_id,
        to_section_id,
        material_id,
        quantity_in_base_units,
        performed_by,
        reason: str = "",
    ):
        """
        Move held stock from one section to another.

        The ledger balance is unchanged; a TRANSFER movement naming both
        sections records the move.
        """
        quantity = SectionInventoryManager._to_positive_decimal(quantity_in_base_units, "quantity")
        if str(from_section_id) == str(to_section_id):
            raise ValidationError("Source and destination sections must differ", field="to_section")

        from_section = SectionInventoryManager._get_section(from_section_id)
        to_section = SectionInventoryManager._get_section(to_section_id)
        material = SectionInventoryManager._get_material(material_id)
        conversion = UnitConversionService()
        holding_unit = conversion.holding_unit(material)

        source = SectionInventory.objects.filter(section=from_section, material=material).first()
        if source is None:
            raise InsufficientStockError(
                material, requested=quantity, available=Decimal("0"), unit=holding_unit, section=from_section
            )
        destination, _ = SectionInventory.objects.get_or_create(section=to_section, material=material)

        # Lock both rows in primary key order
        locked = {
            holding.pk: holding
            for holding in SectionInventory.objects.select_for_update()
            .filter(pk__in=[source.pk, destination.pk])
            .order_by("pk")
        }
        source = locked[source.pk]
        destination = locked[destination.pk]

        if quantity > source.available_quantity:
            raise InsufficientStockError(
                material,
                requested=quantity,
                available=source.available_quantity,
                unit=holding_unit,
                section=from_section,
            )

        StockLedger.record_movement(
            material=material,
            movement_type=MovementType.TRANSFER,
            quantity=SectionInventoryManager._ledger_quantity(quantity, material, conversion, rounding=ROUND_UP)[0],
            performed_by=performed_by,
            from_section=from_section,
            to_section=to_section,
            reason=reason or f"Transfer {from_section.name} -> {to_section.name}",
            reference_id=f"section:{from_section.pk}->section:{to_section.pk}",
        )

        source.quantity -= quantity
        source.updated_by = performed_by
        source.save()
        destination.quantity += quantity
        destination.updated_by = performed_by
        destination.save()

        logger.info(
            f"Transferred {quantity} {holding_unit} of {material.name} "
            f"from {from_section.name} to {to_section.name}"
        )
        return source, destination

    @staticmethod
    @transaction.atomic
    def reserve(section_id, material_id, quantity, reserved_by):
        """Set aside part of a holding so consumption and returns cannot use it."""
        quantity = SectionInventoryManager._to_positive_decimal(quantity, "quantity")
        section = SectionInventoryManager._get_section(section_id)
        material = SectionInventoryManager._get_material(material_id)

        holding = SectionInventoryManager._lock_holding(section, material)
        available = holding.available_quantity if holding else Decimal("0")
        if quantity > available:
            raise InsufficientStockError(
                material,
                requested=quantity,
                available=available,
                unit=UnitConversionService().holding_unit(material),
                section=section,
            )

        holding.reserved_quantity += quantity
        holding.updated_by = reserved_by
        holding.save()
        logger.info(f"Reserved {quantity} of {material.name} in {section.name}")
        return holding

    @staticmethod
    @transaction.atomic
    def release(section_id, material_id, quantity, released_by):
        quantity = SectionInventoryManager._to_positive_decimal(quantity, "quantity")
        section = SectionInventoryManager._get_section(section_id)
        material = SectionInventoryManager._get_material(material_id)

        holding = SectionInventoryManager._lock_holding(section, material)
        if holding is None or quantity > holding.reserved_quantity:
            raise ValidationError(
                f"Cannot release more {material.name} than is reserved in {section.name}",
                field="quantity",
            )

        holding.reserved_quantity -= quantity
        holding.updated_by = released_by
        holding.save()
        logger.info(f"Released {quantity} of {material.name} in {section.name}")
        return holding

    @staticmethod
    def get_section_inventory(section_id):
        return (
            SectionInventory.objects.filter(section_id=section_id)
            .select_related("material", "section")
            .order_by("material__name")
        )

    @staticmethod
    def get_consumption_history(section_id, date_from=None, date_to=None, material_id=None):
        queryset = SectionConsumption.objects.filter(section_id=section_id).select_related(
            "material", "recipe", "consumed_by"
        )
        if material_id:
            queryset = queryset.filter(material_id=material_id)
        if date_from:
            queryset = queryset.filter(consumed_at__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(consumed_at__date__lte=date_to)
        return queryset.order_by("-consumed_at")

    @staticmethod
    def consumption_since(days=30, section_id=None):
        """Consumption rows in the last ``days`` days, optionally for one section."""
        since = timezone.now() - timedelta(days=days)
        queryset = SectionConsumption.objects.filter(consumed_at__gte=since).select_related("material", "section")
        if section_id:
            queryset = queryset.filter(section_id=section_id)
        return queryset
