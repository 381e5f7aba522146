"""
Custom exceptions for purchasing.
"""
from rest_framework import status

from core_backend.exceptions import InventoryCoreError


class InvalidStateTransitionError(InventoryCoreError):
    """Raised when a purchase order action is not allowed from its current status."""

    code = "invalid_state_transition"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, order, target_status, message=None):
        self.order = order
        self.current_status = order.status
        self.target_status = target_status
        if message is None:
            message = f"Cannot move purchase order {order.po_number} from {order.status} to {target_status}"
        super().__init__(
            message,
            details={
                "order_id": str(order.pk),
                "current_status": str(order.status),
                "target_status": str(target_status),
            },
        )
