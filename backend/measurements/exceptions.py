"""
Custom exceptions for unit conversion.
"""
from core_backend.exceptions import InventoryCoreError


class UnitMismatchError(InventoryCoreError):
    """Raised when two units share no conversion path."""

    code = "unit_mismatch"

    def __init__(self, from_unit, to_unit, material=None, message=None):
        self.from_unit = str(from_unit)
        self.to_unit = str(to_unit)
        self.material = material
        if message is None:
            material_info = f" for material '{material.name}'" if material is not None else ""
            message = f"Cannot convert from '{self.from_unit}' to '{self.to_unit}'{material_info}"
        super().__init__(
            message,
            details={
                "from_unit": self.from_unit,
                "to_unit": self.to_unit,
                "material_id": getattr(material, "pk", None),
            },
        )
