from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core_backend.utils.append_only import AppendOnlyModel
from materials.models import RawMaterial, Supplier

# Column scales for ledger quantities and stored money totals
QUANTITY_PLACES = 6
LEDGER_QUANTITY = Decimal("0.000001")
TOTAL_COST_PRECISION = Decimal("0.0001")


class MovementType(models.TextChoices):
    IN = "IN", _("Stock In")
    OUT = "OUT", _("Stock Out")
    TRANSFER = "TRANSFER", _("Transfer")
    ADJUSTMENT = "ADJUSTMENT", _("Adjustment")
    EXPIRED = "EXPIRED", _("Expired")
    DAMAGED = "DAMAGED", _("Damaged")


class StockEntry(AppendOnlyModel):
    """
    A receipt of a raw material into the central ledger.

    Quantity and cost are in the material's purchase unit. Entries are
    immutable; mistakes are corrected with an ADJUSTMENT movement.
    """
    material = models.ForeignKey(
        RawMaterial,
        on_delete=models.PROTECT,
        related_name="stock_entries",
    )
    quantity = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        help_text=_("Quantity received, in the material's purchase unit."),
    )
    unit_cost = models.DecimalField(max_digits=14, decimal_places=6)
    total_cost = models.DecimalField(
        max_digits=16,
        decimal_places=4,
        help_text=_("quantity x unit_cost"),
    )
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_entries",
    )
    supplier_name = models.CharField(max_length=200, blank=True)
    batch_number = models.CharField(max_length=100, blank=True)
    production_date = models.DateField(null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    received_date = models.DateField()
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="received_stock_entries",
    )
    purchase_order_item = models.ForeignKey(
        "purchasing.PurchaseOrderItem",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_entries",
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("Stock Entry")
        verbose_name_plural = _("Stock Entries")
        ordering = ["-received_date", "-created_at"]
        indexes = [
            models.Index(fields=["material", "received_date"], name="stockentry_material_date_idx"),
            models.Index(fields=["expiry_date"], name="stockentry_expiry_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="stockentry_quantity_positive"),
            models.CheckConstraint(condition=models.Q(unit_cost__gte=0), name="stockentry_unit_cost_non_negative"),
        ]

    def __str__(self):
        return f"{self.material.name}: +{self.quantity} {self.material.unit} on {self.received_date}"


class StockMovement(AppendOnlyModel):
    """
    Any change to the central ledger other than a receipt.

    ``quantity`` is positive in the material's purchase unit, except for
    ADJUSTMENT movements which carry their own sign. Section assignments are
    OUT movements with ``to_section`` set; returns from a section are
    TRANSFER movements carrying only ``from_section``; section-to-section
    transfers carry both and leave the ledger balance unchanged.
    """
    material = models.ForeignKey(
        RawMaterial,
        on_delete=models.PROTECT,
        related_name="stock_movements",
    )
    stock_entry = models.ForeignKey(
        StockEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="movements",
    )
    movement_type = models.CharField(max_length=20, choices=MovementType.choices, db_index=True)
    quantity = models.DecimalField(max_digits=18, decimal_places=6)
    from_section = models.ForeignKey(
        "sections.Section",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="outgoing_movements",
    )
    to_section = models.ForeignKey(
        "sections.Section",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="incoming_movements",
    )
    reason = models.CharField(max_length=255, blank=True)
    reference_id = models.CharField(
        max_length=100,
        blank=True,
        db_index=True,
        help_text=_("Reference to the operation that caused this movement, e.g. 'section:3'."),
    )
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="stock_movements",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("Stock Movement")
        verbose_name_plural = _("Stock Movements")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["material", "created_at"], name="stockmove_material_date_idx"),
            models.Index(fields=["movement_type", "created_at"], name="stockmove_type_date_idx"),
        ]

    def __str__(self):
        return f"{self.movement_type} {self.quantity} {self.material.unit} of {self.material.name}"

    @property
    def ledger_delta(self) -> Decimal:
        return ledger_delta(self.movement_type, self.quantity, self.from_section_id, self.to_section_id)


def ledger_delta(movement_type, quantity, from_section_id=None, to_section_id=None) -> Decimal:
    """
    Signed effect of a movement on the central ledger balance.

    TRANSFER depends on direction: ledger to section debits, section to
    ledger credits, section to section is neutral.
    """
    quantity = Decimal(str(quantity))
    if movement_type == MovementType.IN:
        return quantity
    if movement_type == MovementType.ADJUSTMENT:
        return quantity
    if movement_type == MovementType.TRANSFER:
        if from_section_id and to_section_id:
            return Decimal("0")
        if from_section_id:
            return quantity
        return -quantity
    # OUT, EXPIRED, DAMAGED
    return -quantity
