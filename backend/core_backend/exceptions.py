"""
Base exceptions for the inventory ledger.

Every domain error raised by a service derives from InventoryCoreError and
carries a stable ``code`` plus structured ``details`` so API clients can
react without parsing messages. App-specific subclasses live in each app's
``exceptions`` module.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class InventoryCoreError(Exception):
    """Base exception for inventory ledger errors."""

    code = "inventory_error"
    http_status = status.HTTP_400_BAD_REQUEST

    def __init__(self, message=None, details=None):
        self.details = details or {}
        if message is None:
            message = "Inventory operation failed"
        super().__init__(message)

    def to_dict(self):
        return {
            "status": "error",
            "code": self.code,
            "message": str(self),
            "details": self.details,
        }


class ValidationError(InventoryCoreError, ValueError):
    """Raised when input to a service operation is malformed or out of range."""

    code = "validation_error"

    def __init__(self, message, field=None, details=None):
        self.field = field
        details = dict(details or {})
        if field:
            details.setdefault("field", field)
        super().__init__(message, details)


def api_exception_handler(exc, context):
    """
    DRF exception handler that renders domain errors consistently.

    Domain errors become ``{"status": "error", "code", "message", "details"}``
    bodies with the status code declared on the exception class. Everything
    else falls through to the default DRF handler.
    """
    if isinstance(exc, InventoryCoreError):
        view = context.get("view")
        logger.warning(
            f"{exc.__class__.__name__} in {view.__class__.__name__ if view else 'unknown view'}: {exc}"
        )
        return Response(exc.to_dict(), status=exc.http_status)

    return exception_handler(exc, context)


class ImmutableRecordError(InventoryCoreError):
    """Raised when code tries to update or delete an append-only ledger row."""

    code = "immutable_record"

    def __init__(self, record, operation, message=None):
        self.record = record
        self.operation = operation
        if message is None:
            message = (
                f"{record.__class__.__name__} records are append-only and cannot be {operation}; "
                f"record a correcting movement instead"
            )
        super().__init__(message, details={"model": record.__class__.__name__, "operation": operation})
