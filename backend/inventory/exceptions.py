"""
Custom exceptions for the stock ledger.
"""
from rest_framework import status

from core_backend.exceptions import InventoryCoreError


class InsufficientStockError(InventoryCoreError):
    """Raised when an operation would drive a stock balance negative."""

    code = "insufficient_stock"
    http_status = status.HTTP_409_CONFLICT

    def __init__(self, material, requested, available, unit=None, section=None, message=None):
        self.material = material
        self.requested = requested
        self.available = available
        self.unit = unit or getattr(material, "unit", None)
        self.section = section
        if message is None:
            location = f" in section '{section.name}'" if section is not None else ""
            message = (
                f"Insufficient stock for {material.name}{location}. "
                f"Required: {requested} {self.unit}, Available: {available} {self.unit}"
            )
        super().__init__(
            message,
            details={
                "material_id": material.pk,
                "material_name": material.name,
                "requested": str(requested),
                "available": str(available),
                "unit": str(self.unit) if self.unit else None,
                "section_id": getattr(section, "pk", None),
            },
        )
