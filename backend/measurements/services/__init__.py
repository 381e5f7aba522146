from .conversion import GuardedValue, PackInfo, UnitConversionService
from .units import UNIT_DEFINITIONS, UNIT_STRING_MAPPINGS

__all__ = [
    "GuardedValue",
    "PackInfo",
    "UnitConversionService",
    "UNIT_DEFINITIONS",
    "UNIT_STRING_MAPPINGS",
]
