from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from django.db import transaction
from django.db.models import Max, Q, Sum
from django.utils import timezone

from core_backend.exceptions import ValidationError
from core_backend.utils.decimals import parse_decimal
from core_backend.infrastructure.cache_utils import cache_dynamic_data, invalidate_cache_keys
from materials.models import RawMaterial
from measurements.models import CONTAINER_UNITS
from .exceptions import InsufficientStockError
from .models import QUANTITY_PLACES, TOTAL_COST_PRECISION, MovementType, StockEntry, StockMovement, ledger_delta
import logging

logger = logging.getLogger(__name__)

CREDIT_MOVEMENTS = (
    Q(movement_type__in=[MovementType.IN, MovementType.ADJUSTMENT])
    | Q(movement_type=MovementType.TRANSFER, from_section__isnull=False, to_section__isnull=True)
)
DEBIT_MOVEMENTS = (
    Q(movement_type__in=[MovementType.OUT, MovementType.EXPIRED, MovementType.DAMAGED])
    | Q(movement_type=MovementType.TRANSFER, from_section__isnull=True)
)


@dataclass
class StockLevel:
    """Derived balance of one material in the central ledger, in purchase units."""
    material_id: int
    material_name: str
    unit: str
    total_received: Decimal
    available_units_quantity: Decimal
    min_level: Decimal
    max_level: Decimal
    is_low_stock: bool
    base_unit: Optional[str] = None
    available_base_quantity: Optional[Decimal] = None
    last_updated: Optional[datetime] = None

    def to_dict(self):
        return asdict(self)


class StockLedger:
    """
    The central stock ledger.

    Balances are never stored: a material's available quantity is the sum of
    its stock entries plus the signed effect of its movements. Every write
    locks the material row first so concurrent debits serialize on it.
    """

    @staticmethod
    def _to_decimal(value, field):
        return parse_decimal(value, field, places=QUANTITY_PLACES)

    @staticmethod
    def _lock_material(material) -> RawMaterial:
        material_id = material.pk if isinstance(material, RawMaterial) else material
        try:
            return RawMaterial.all_objects.select_for_update().get(pk=material_id)
        except RawMaterial.DoesNotExist:
            raise ValidationError(f"Raw material {material_id} does not exist", field="material")

    @staticmethod
    def _invalidate_stock_level(material_id):
        key = _cached_stock_level.cache_key_for(int(material_id))
        invalidate_cache_keys(key)
        transaction.on_commit(lambda: invalidate_cache_keys(key))

    @staticmethod
    def compute_stock_levels(materials) -> List[StockLevel]:
        """
        Aggregate entries and movements for a set of materials.

        Two grouped queries regardless of how many materials are passed.
        """
        materials = list(materials)
        material_ids = [m.pk for m in materials]

        entry_totals = {
            row["material_id"]: row
            for row in StockEntry.objects.filter(material_id__in=material_ids)
            .order_by()
            .values("material_id")
            .annotate(total=Sum("quantity"), last=Max("created_at"))
        }
        movement_totals = {
            row["material_id"]: row
            for row in StockMovement.objects.filter(material_id__in=material_ids)
            .order_by()
            .values("material_id")
            .annotate(
                credits=Sum("quantity", filter=CREDIT_MOVEMENTS),
                debits=Sum("quantity", filter=DEBIT_MOVEMENTS),
                last=Max("created_at"),
            )
        }

        levels = []
        for material in materials:
            entries = entry_totals.get(material.pk, {})
            movements = movement_totals.get(material.pk, {})

            total_received = entries.get("total") or Decimal("0")
            available = (
                total_received
                + (movements.get("credits") or Decimal("0"))
                - (movements.get("debits") or Decimal("0"))
            )
            timestamps = [t for t in (entries.get("last"), movements.get("last")) if t]

            base_unit = None
            available_base_quantity = None
            if material.unit in CONTAINER_UNITS and material.units_per_pack and material.units_per_pack > 0:
                base_unit = material.base_unit
                available_base_quantity = available * material.units_per_pack

            levels.append(StockLevel(
                material_id=material.pk,
                material_name=material.name,
                unit=material.unit,
                total_received=total_received,
                available_units_quantity=available,
                min_level=material.min_stock_level,
                max_level=material.max_stock_level,
                is_low_stock=available <= material.min_stock_level,
                base_unit=base_unit,
                available_base_quantity=available_base_quantity,
                last_updated=max(timestamps) if timestamps else None,
            ))
        return levels

    @staticmethod
    def compute_stock_level(material) -> StockLevel:
        """Uncached stock level; used inside write transactions."""
        return StockLedger.compute_stock_levels([material])[0]

    @staticmethod
    def get_stock_level(material_id) -> StockLevel:
        """
        Current stock level for a material, served from a short-lived cache.

        Raises:
            ValidationError: If the material does not exist.
        """
        return _cached_stock_level(int(material_id))

    @staticmethod
    def get_stock_levels(active_only=True) -> List[StockLevel]:
        manager = RawMaterial.objects if active_only else RawMaterial.all_objects
        return StockLedger.compute_stock_levels(manager.order_by("name"))

    @staticmethod
    def get_low_stock_levels() -> List[StockLevel]:
        return [level for level in StockLedger.get_stock_levels() if level.is_low_stock]

    @staticmethod
    def validate_availability(material_id, required_quantity):
        """
        Read-only availability check.

        Returns:
            (is_available, available_units_quantity)
        """
        required = StockLedger._to_decimal(required_quantity, "quantity")
        level = StockLedger.get_stock_level(material_id)
        return level.available_units_quantity >= required, level.available_units_quantity

    @staticmethod
    @transaction.atomic
    def record_entry(
        material,
        quantity,
        unit_cost,
        received_by,
        supplier=None,
        supplier_name: str = "",
        batch_number: str = "",
        production_date=None,
        expiry_date=None,
        received_date=None,
        purchase_order_item=None,
        notes: str = "",
    ) -> StockEntry:
        """
        Record a receipt of stock into the ledger.

        Args:
            material: RawMaterial instance or id.
            quantity: Quantity received, in the material's purchase unit.
            unit_cost: Cost per purchase unit for this receipt.
            received_by: The user receiving the stock.

        Raises:
            ValidationError: For non-positive quantity, negative cost, or an
                archived material.
        """
        quantity = StockLedger._to_decimal(quantity, "quantity")
        unit_cost = StockLedger._to_decimal(unit_cost, "unit_cost")

        if quantity <= 0:
            raise ValidationError("Quantity must be greater than zero", field="quantity")
        if unit_cost < 0:
            raise ValidationError("Unit cost cannot be negative", field="unit_cost")
        if expiry_date and production_date and expiry_date < production_date:
            raise ValidationError("Expiry date cannot be before production date", field="expiry_date")

        material = StockLedger._lock_material(material)
        if not material.is_active:
            raise ValidationError(
                f"Cannot receive stock for archived material '{material.name}'",
                field="material",
            )

        if supplier is not None and not supplier_name:
            supplier_name = supplier.name

        entry = StockEntry.objects.create(
            material=material,
            quantity=quantity,
            unit_cost=unit_cost,
            total_cost=(quantity * unit_cost).quantize(TOTAL_COST_PRECISION, rounding=ROUND_HALF_UP),
            supplier=supplier,
            supplier_name=supplier_name,
            batch_number=batch_number,
            production_date=production_date,
            expiry_date=expiry_date,
            received_date=received_date or timezone.localdate(),
            received_by=received_by,
            purchase_order_item=purchase_order_item,
            notes=notes,
        )

        StockLedger._invalidate_stock_level(material.pk)
        logger.info(
            f"Recorded stock entry {entry.pk}: +{quantity} {material.unit} of {material.name} "
            f"at {unit_cost} by {received_by}"
        )
        return entry

    @staticmethod
    @transaction.atomic
    def record_movement(
        material,
        movement_type,
        quantity,
        performed_by,
        from_section=None,
        to_section=None,
        reason: str = "",
        reference_id: str = "",
        stock_entry=None,
    ) -> StockMovement:
        """
        Record a non-receipt change to the ledger.

        The material row is locked, availability recomputed under the lock,
        and any movement that would take availability below zero is rejected.

        Raises:
            ValidationError: For an unknown movement type or invalid quantity.
            InsufficientStockError: If the movement would drive availability negative.
        """
        try:
            movement_type = MovementType(movement_type)
        except ValueError:
            raise ValidationError(f"Unknown movement type '{movement_type}'", field="movement_type")

        quantity = StockLedger._to_decimal(quantity, "quantity")
        if movement_type == MovementType.ADJUSTMENT:
            if quantity == 0:
                raise ValidationError("Adjustment quantity cannot be zero", field="quantity")
        elif quantity <= 0:
            raise ValidationError("Quantity must be greater than zero", field="quantity")

        if (
            from_section is not None
            and to_section is not None
            and from_section.pk == to_section.pk
        ):
            raise ValidationError("Source and destination sections must differ", field="to_section")

        material = StockLedger._lock_material(material)
        delta = ledger_delta(
            movement_type,
            quantity,
            getattr(from_section, "pk", None),
            getattr(to_section, "pk", None),
        )

        if delta < 0:
            available = StockLedger.compute_stock_level(material).available_units_quantity
            if available + delta < 0:
                logger.warning(
                    f"Rejected {movement_type} of {quantity} {material.unit} for {material.name}: "
                    f"only {available} available"
                )
                raise InsufficientStockError(material, requested=-delta, available=available)

        movement = StockMovement.objects.create(
            material=material,
            movement_type=movement_type,
            quantity=quantity,
            from_section=from_section,
            to_section=to_section,
            reason=reason,
            reference_id=reference_id,
            performed_by=performed_by,
            stock_entry=stock_entry,
        )

        StockLedger._invalidate_stock_level(material.pk)
        logger.info(
            f"Recorded {movement_type} movement {movement.pk}: {delta:+} {material.unit} "
            f"of {material.name} by {performed_by}"
        )
        return movement


@cache_dynamic_data(timeout=30, timeout_setting="INVENTORY_STOCK_LEVEL_CACHE_TIMEOUT")
def _cached_stock_level(material_id) -> StockLevel:
    try:
        material = RawMaterial.all_objects.get(pk=material_id)
    except RawMaterial.DoesNotExist:
        raise ValidationError(f"Raw material {material_id} does not exist", field="material")
    return StockLedger.compute_stock_level(material)
