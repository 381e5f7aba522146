import uuid
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core_backend.utils.append_only import AppendOnlyModel
from materials.models import RawMaterial, Supplier


class PurchaseOrderStatus(models.TextChoices):
    DRAFT = "DRAFT", _("Draft")  # Being prepared
    PENDING_APPROVAL = "PENDING_APPROVAL", _("Pending Approval")
    APPROVED = "APPROVED", _("Approved")
    SENT = "SENT", _("Sent")  # With the supplier
    PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED", _("Partially Received")
    RECEIVED = "RECEIVED", _("Received")
    CANCELLED = "CANCELLED", _("Cancelled")


class PurchaseOrder(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    po_number = models.CharField(max_length=32, unique=True, editable=False)
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, related_name="purchase_orders")
    order_date = models.DateField(default=timezone.localdate)
    expected_date = models.DateField(null=True, blank=True)
    received_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=PurchaseOrderStatus.choices,
        default=PurchaseOrderStatus.DRAFT,
        db_index=True,
    )
    total_amount = models.DecimalField(max_digits=16, decimal_places=4, default=0)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="created_purchase_orders",
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_purchase_orders",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-order_date", "-created_at"]
        verbose_name = _("Purchase Order")
        verbose_name_plural = _("Purchase Orders")
        indexes = [
            models.Index(fields=["status", "order_date"], name="po_status_date_idx"),
            models.Index(fields=["supplier", "order_date"], name="po_supplier_date_idx"),
        ]

    def __str__(self):
        return f"{self.po_number} ({self.supplier.name}) - {self.status}"

    def save(self, *args, **kwargs):
        # Derived from the UUID so numbers never collide
        if not self.po_number:
            self.po_number = f"PO-{self.order_date:%Y%m%d}-{self.id.hex[:8].upper()}"
        super().save(*args, **kwargs)

    @property
    def is_fully_received(self) -> bool:
        return all(item.is_fully_received for item in self.items.all())


class PurchaseOrderItem(models.Model):
    order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name="items")
    material = models.ForeignKey(RawMaterial, on_delete=models.PROTECT, related_name="purchase_order_items")
    quantity_ordered = models.DecimalField(max_digits=18, decimal_places=6)
    quantity_received = models.DecimalField(max_digits=18, decimal_places=6, default=0)
    unit_cost = models.DecimalField(max_digits=14, decimal_places=6)
    line_total = models.DecimalField(max_digits=16, decimal_places=4, default=0)
    notes = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["id"]
        verbose_name = _("Purchase Order Item")
        verbose_name_plural = _("Purchase Order Items")
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity_ordered__gt=0), name="po_item_quantity_ordered_positive"),
            models.CheckConstraint(condition=models.Q(quantity_received__gte=0), name="po_item_quantity_received_non_negative"),
            models.CheckConstraint(
                condition=models.Q(quantity_received__lte=models.F("quantity_ordered")),
                name="po_item_received_within_ordered",
            ),
            models.CheckConstraint(condition=models.Q(unit_cost__gte=0), name="po_item_unit_cost_non_negative"),
        ]

    def __str__(self):
        return f"{self.quantity_ordered} {self.material.unit} {self.material.name} @ {self.unit_cost}"

    def save(self, *args, **kwargs):
        self.line_total = Decimal(str(self.quantity_ordered)) * Decimal(str(self.unit_cost))
        super().save(*args, **kwargs)

    @property
    def remaining_quantity(self) -> Decimal:
        return self.quantity_ordered - self.quantity_received

    @property
    def is_fully_received(self) -> bool:
        return self.quantity_received >= self.quantity_ordered


class PurchaseReceipt(AppendOnlyModel):
    """One delivery against a purchase order."""
    order = models.ForeignKey(PurchaseOrder, on_delete=models.PROTECT, related_name="receipts")
    receipt_number = models.CharField(max_length=40, unique=True)
    received_date = models.DateField(default=timezone.localdate)
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="purchase_receipts",
    )
    total_amount = models.DecimalField(max_digits=16, decimal_places=4, default=0)
    is_partial = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Purchase Receipt")
        verbose_name_plural = _("Purchase Receipts")

    def __str__(self):
        return f"{self.receipt_number} for {self.order.po_number}"
