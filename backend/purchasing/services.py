"""
Purchase order workflow.

    DRAFT -> PENDING_APPROVAL -> APPROVED -> SENT -> PARTIALLY_RECEIVED -> RECEIVED

Any status before RECEIVED may be cancelled. Receiving goods writes stock
entries to the central ledger through StockLedger, so the ledger stays the
only place stock is created.
"""
from datetime import timedelta
from decimal import Decimal
from typing import List

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from core_backend.exceptions import ValidationError
from core_backend.utils.decimals import parse_decimal
from inventory.services import StockLedger
from materials.models import RawMaterial
from .exceptions import InvalidStateTransitionError
from .models import PurchaseOrder, PurchaseOrderItem, PurchaseOrderStatus, PurchaseReceipt
import logging

logger = logging.getLogger(__name__)


class ReorderUrgency:
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    ORDER = {HIGH: 0, MEDIUM: 1, LOW: 2}


class PurchaseOrderWorkflow:
    """Creates purchase orders and moves them through their lifecycle."""

    VALID_STATUS_TRANSITIONS = {
        PurchaseOrderStatus.DRAFT: [
            PurchaseOrderStatus.PENDING_APPROVAL,
            PurchaseOrderStatus.CANCELLED,
        ],
        PurchaseOrderStatus.PENDING_APPROVAL: [
            PurchaseOrderStatus.APPROVED,
            PurchaseOrderStatus.CANCELLED,
        ],
        PurchaseOrderStatus.APPROVED: [
            PurchaseOrderStatus.SENT,
            PurchaseOrderStatus.CANCELLED,
        ],
        PurchaseOrderStatus.SENT: [
            PurchaseOrderStatus.PARTIALLY_RECEIVED,
            PurchaseOrderStatus.RECEIVED,
            PurchaseOrderStatus.CANCELLED,
        ],
        PurchaseOrderStatus.PARTIALLY_RECEIVED: [
            PurchaseOrderStatus.PARTIALLY_RECEIVED,
            PurchaseOrderStatus.RECEIVED,
            PurchaseOrderStatus.CANCELLED,  # Stock already received stays in the ledger
        ],
        PurchaseOrderStatus.RECEIVED: [],
        PurchaseOrderStatus.CANCELLED: [],
    }

    OPEN_STATUSES = [
        PurchaseOrderStatus.DRAFT,
        PurchaseOrderStatus.PENDING_APPROVAL,
        PurchaseOrderStatus.APPROVED,
        PurchaseOrderStatus.SENT,
        PurchaseOrderStatus.PARTIALLY_RECEIVED,
    ]

    @staticmethod
    def _to_decimal(value, field):
        return parse_decimal(value, field)

    @staticmethod
    def _lock_order(order) -> PurchaseOrder:
        order_id = order.pk if isinstance(order, PurchaseOrder) else order
        try:
            return PurchaseOrder.objects.select_for_update().select_related("supplier").get(pk=order_id)
        except PurchaseOrder.DoesNotExist:
            raise ValidationError(f"Purchase order {order_id} does not exist", field="order")

    @staticmethod
    def _check_transition(order, new_status):
        if new_status not in PurchaseOrderWorkflow.VALID_STATUS_TRANSITIONS.get(order.status, []):
            logger.warning(f"Rejected transition of {order.po_number} from {order.status} to {new_status}")
            raise InvalidStateTransitionError(order, new_status)

    @staticmethod
    @transaction.atomic
    def create(supplier, order_date, expected_date, items, created_by, notes: str = "") -> PurchaseOrder:
        """
        Create a DRAFT purchase order.

        Args:
            supplier: Supplier instance.
            order_date: Date the order is placed (defaults to today when None).
            expected_date: Expected delivery date, not before order_date.
            items: Iterable of dicts with ``material`` (instance or id),
                ``quantity`` and optional ``unit_cost`` (defaults to the
                material's current unit cost), in purchase units.
            created_by: The acting user.

        Raises:
            ValidationError: If there are no items, a quantity is not
                positive, a cost is negative or the dates are inverted.
        """
        order_date = order_date or timezone.localdate()
        if expected_date is not None and expected_date < order_date:
            raise ValidationError("Expected date cannot be before the order date", field="expected_date")
        if supplier is None:
            raise ValidationError("A supplier is required", field="supplier")
        if not supplier.is_active:
            raise ValidationError(f"Supplier '{supplier.name}' is archived", field="supplier")

        items = list(items or [])
        if not items:
            raise ValidationError("A purchase order needs at least one item", field="items")

        lines = []
        for index, item in enumerate(items):
            material = item.get("material")
            if not isinstance(material, RawMaterial):
                material = RawMaterial.objects.filter(pk=material or item.get("material_id")).first()
            if material is None:
                raise ValidationError(f"Item {index + 1}: unknown or archived material", field="items")

            quantity = PurchaseOrderWorkflow._to_decimal(item.get("quantity"), "quantity")
            if quantity <= 0:
                raise ValidationError(f"Item {index + 1}: quantity must be greater than zero", field="items")

            unit_cost = item.get("unit_cost")
            unit_cost = material.unit_cost if unit_cost is None else PurchaseOrderWorkflow._to_decimal(unit_cost, "unit_cost")
            if unit_cost < 0:
                raise ValidationError(f"Item {index + 1}: unit cost cannot be negative", field="items")

            lines.append((material, quantity, unit_cost, item.get("notes", "")))

        order = PurchaseOrder.objects.create(
            supplier=supplier,
            order_date=order_date,
            expected_date=expected_date,
            status=PurchaseOrderStatus.DRAFT,
            notes=notes,
            created_by=created_by,
        )
        total = Decimal("0")
        for material, quantity, unit_cost, line_notes in lines:
            item = PurchaseOrderItem.objects.create(
                order=order,
                material=material,
                quantity_ordered=quantity,
                unit_cost=unit_cost,
                notes=line_notes,
            )
            total += item.line_total

        order.total_amount = total
        order.save(update_fields=["total_amount", "updated_at"])
        logger.info(f"Created purchase order {order.po_number} for {supplier.name}: {len(lines)} items, total {total}")
        return order

    @staticmethod
    @transaction.atomic
    def submit(order) -> PurchaseOrder:
        order = PurchaseOrderWorkflow._lock_order(order)
        PurchaseOrderWorkflow._check_transition(order, PurchaseOrderStatus.PENDING_APPROVAL)
        order.status = PurchaseOrderStatus.PENDING_APPROVAL
        order.save(update_fields=["status", "updated_at"])
        logger.info(f"Submitted purchase order {order.po_number} for approval")
        return order

    @staticmethod
    @transaction.atomic
    def approve(order, approved_by) -> PurchaseOrder:
        order = PurchaseOrderWorkflow._lock_order(order)
        PurchaseOrderWorkflow._check_transition(order, PurchaseOrderStatus.APPROVED)
        order.status = PurchaseOrderStatus.APPROVED
        order.approved_by = approved_by
        order.approved_at = timezone.now()
        order.save(update_fields=["status", "approved_by", "approved_at", "updated_at"])
        logger.info(f"Approved purchase order {order.po_number} by {approved_by}")
        return order

    @staticmethod
    @transaction.atomic
    def send(order) -> PurchaseOrder:
        order = PurchaseOrderWorkflow._lock_order(order)
        PurchaseOrderWorkflow._check_transition(order, PurchaseOrderStatus.SENT)
        order.status = PurchaseOrderStatus.SENT
        order.sent_at = timezone.now()
        order.save(update_fields=["status", "sent_at", "updated_at"])
        logger.info(f"Sent purchase order {order.po_number} to {order.supplier.name}")
        return order

    @staticmethod
    @transaction.atomic
    def cancel(order, cancelled_by, reason: str = "") -> PurchaseOrder:
        order = PurchaseOrderWorkflow._lock_order(order)
        PurchaseOrderWorkflow._check_transition(order, PurchaseOrderStatus.CANCELLED)
        order.status = PurchaseOrderStatus.CANCELLED
        order.cancelled_at = timezone.now()
        if reason:
            order.notes = f"{order.notes}\nCancelled: {reason}".strip()
        order.save(update_fields=["status", "cancelled_at", "notes", "updated_at"])
        logger.info(f"Cancelled purchase order {order.po_number} by {cancelled_by}")
        return order

    @staticmethod
    @transaction.atomic
    def receive(order, received_items, received_by, received_date=None, notes: str = "") -> PurchaseReceipt:
        """
        Receive goods against a SENT or PARTIALLY_RECEIVED order.

        Every received line becomes a stock entry in the ledger. The whole
        receipt is validated before anything is written.

        Args:
            order: PurchaseOrder instance or id.
            received_items: Iterable of dicts with ``item_id``, ``quantity``
                and optional ``unit_cost`` (defaults to the ordered cost).
            received_by: The acting user.
            received_date: Delivery date (defaults to today).

        Returns:
            The PurchaseReceipt written for this delivery.

        Raises:
            InvalidStateTransitionError: If the order is not awaiting goods.
            ValidationError: If a line is unknown, not positive, or would
                exceed the ordered quantity.
        """
        order = PurchaseOrderWorkflow._lock_order(order)
        if order.status not in (PurchaseOrderStatus.SENT, PurchaseOrderStatus.PARTIALLY_RECEIVED):
            logger.warning(f"Rejected receipt against {order.po_number} in status {order.status}")
            raise InvalidStateTransitionError(
                order,
                PurchaseOrderStatus.RECEIVED,
                message=f"Cannot receive goods against purchase order {order.po_number} in status {order.status}",
            )

        received_items = list(received_items or [])
        if not received_items:
            raise ValidationError("A receipt needs at least one item", field="items")

        items = {
            item.pk: item
            for item in PurchaseOrderItem.objects.select_for_update()
            .filter(order=order)
            .select_related("material")
            .order_by("pk")
        }

        requested = {}
        lines = []
        for received in received_items:
            item_id = received.get("item_id")
            item = items.get(int(item_id)) if item_id is not None and str(item_id).isdigit() else None
            if item is None:
                raise ValidationError(f"Item {item_id} does not belong to {order.po_number}", field="items")

            quantity = PurchaseOrderWorkflow._to_decimal(received.get("quantity"), "quantity")
            if quantity <= 0:
                raise ValidationError(f"Received quantity for item {item_id} must be greater than zero", field="items")

            unit_cost = received.get("unit_cost")
            unit_cost = item.unit_cost if unit_cost is None else PurchaseOrderWorkflow._to_decimal(unit_cost, "unit_cost")
            if unit_cost < 0:
                raise ValidationError(f"Unit cost for item {item_id} cannot be negative", field="items")

            requested[item.pk] = requested.get(item.pk, Decimal("0")) + quantity
            if item.quantity_received + requested[item.pk] > item.quantity_ordered:
                raise ValidationError(
                    f"Receiving {requested[item.pk]} of {item.material.name} would exceed the ordered "
                    f"{item.quantity_ordered} ({item.quantity_received} already received)",
                    field="items",
                    details={"item_id": item.pk},
                )
            lines.append((item, quantity, unit_cost))

        received_date = received_date or timezone.localdate()
        receipt_total = Decimal("0")
        for item, quantity, unit_cost in lines:
            entry = StockLedger.record_entry(
                material=item.material,
                quantity=quantity,
                unit_cost=unit_cost,
                received_by=received_by,
                supplier=order.supplier,
                supplier_name=order.supplier.name,
                received_date=received_date,
                purchase_order_item=item,
                notes=f"Received against {order.po_number}",
            )
            receipt_total += entry.total_cost
            item.quantity_received += quantity
            item.save(update_fields=["quantity_received"])

        fully_received = all(item.is_fully_received for item in items.values())
        new_status = PurchaseOrderStatus.RECEIVED if fully_received else PurchaseOrderStatus.PARTIALLY_RECEIVED
        PurchaseOrderWorkflow._check_transition(order, new_status)

        receipt = PurchaseReceipt.objects.create(
            order=order,
            receipt_number=f"{order.po_number}-R{order.receipts.count() + 1}",
            received_date=received_date,
            received_by=received_by,
            total_amount=receipt_total,
            is_partial=not fully_received,
            notes=notes,
        )

        order.status = new_status
        update_fields = ["status", "updated_at"]
        if fully_received:
            order.received_date = received_date
            update_fields.append("received_date")
        order.save(update_fields=update_fields)

        logger.info(
            f"Received {len(lines)} line(s) against {order.po_number} worth {receipt_total}; "
            f"order is now {new_status}"
        )
        return receipt

    @staticmethod
    def reorder_suggestions() -> dict:
        """
        Materials at or below their minimum level, with how much to order.

        Suggested quantity tops the material back up to its maximum level.
        Urgency is HIGH when nothing is left, MEDIUM at or below half the
        minimum, LOW otherwise.
        """
        materials = {m.pk: m for m in RawMaterial.objects.select_related("supplier")}
        suggestions = []
        for level in StockLedger.get_stock_levels():
            if level.available_units_quantity > level.min_level:
                continue
            material = materials[level.material_id]
            available = level.available_units_quantity

            if available <= 0:
                urgency = ReorderUrgency.HIGH
            elif available <= level.min_level / 2:
                urgency = ReorderUrgency.MEDIUM
            else:
                urgency = ReorderUrgency.LOW

            suggested = max(level.max_level - available, Decimal("0"))
            suggestions.append({
                "material_id": material.pk,
                "material_name": material.name,
                "category": material.category,
                "unit": material.unit,
                "available_quantity": available,
                "min_stock_level": level.min_level,
                "max_stock_level": level.max_level,
                "suggested_quantity": suggested,
                "unit_cost": material.unit_cost,
                "estimated_cost": suggested * material.unit_cost,
                "supplier_id": material.supplier_id,
                "supplier_name": material.supplier.name if material.supplier else None,
                "urgency": urgency,
            })

        suggestions.sort(key=lambda s: (ReorderUrgency.ORDER[s["urgency"]], s["material_name"]))
        summary = {
            "total_items": len(suggestions),
            "high_urgency": sum(1 for s in suggestions if s["urgency"] == ReorderUrgency.HIGH),
            "medium_urgency": sum(1 for s in suggestions if s["urgency"] == ReorderUrgency.MEDIUM),
            "low_urgency": sum(1 for s in suggestions if s["urgency"] == ReorderUrgency.LOW),
            "estimated_value": sum((s["estimated_cost"] for s in suggestions), Decimal("0")),
        }
        return {"suggestions": suggestions, "summary": summary}

    @staticmethod
    def get_analytics(days=30) -> dict:
        """Order volume, value and backlog for the last ``days`` days."""
        if days <= 0:
            raise ValidationError("days must be greater than zero", field="days")
        today = timezone.localdate()
        start_date = today - timedelta(days=days)

        window = PurchaseOrder.objects.filter(order_date__gte=start_date)
        totals = window.aggregate(count=Count("id"), value=Sum("total_amount"))

        top_suppliers = list(
            window.exclude(status=PurchaseOrderStatus.CANCELLED)
            .order_by()
            .values("supplier_id", "supplier__name")
            .annotate(order_count=Count("id"), total_value=Sum("total_amount"))
            .order_by("-total_value")[:5]
        )
        category_spending = list(
            PurchaseOrderItem.objects.filter(order__order_date__gte=start_date)
            .exclude(order__status__in=[PurchaseOrderStatus.DRAFT, PurchaseOrderStatus.CANCELLED])
            .order_by()
            .values("material__category")
            .annotate(total_spending=Sum("line_total"), item_count=Count("id"))
            .order_by("-total_spending")
        )

        return {
            "period_days": days,
            "start_date": start_date,
            "total_orders": totals["count"] or 0,
            "total_value": totals["value"] or Decimal("0"),
            "pending_orders": PurchaseOrder.objects.filter(
                status__in=PurchaseOrderWorkflow.OPEN_STATUSES
            ).count(),
            "overdue_orders": PurchaseOrder.objects.filter(
                expected_date__lt=today,
                status__in=PurchaseOrderWorkflow.OPEN_STATUSES,
            ).count(),
            "status_breakdown": {
                row["status"]: row["count"]
                for row in window.order_by().values("status").annotate(count=Count("id"))
            },
            "top_suppliers": [
                {
                    "supplier_id": row["supplier_id"],
                    "supplier_name": row["supplier__name"],
                    "order_count": row["order_count"],
                    "total_value": row["total_value"] or Decimal("0"),
                }
                for row in top_suppliers
            ],
            "category_spending": [
                {
                    "category": row["material__category"],
                    "total_spending": row["total_spending"] or Decimal("0"),
                    "item_count": row["item_count"],
                }
                for row in category_spending
            ],
        }
