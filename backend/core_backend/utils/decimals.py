"""
Decimal parsing for service inputs.
"""
from decimal import Decimal

from core_backend.exceptions import ValidationError


def decimal_places(number: Decimal) -> int:
    """Significant fractional digits, ignoring trailing zeros."""
    exponent = number.normalize().as_tuple().exponent
    return max(0, -exponent)


def parse_decimal(value, field, places=None) -> Decimal:
    """
    Parse ``value`` into a finite Decimal.

    With ``places`` set, values carrying more fractional digits than the
    column stores are rejected instead of being silently truncated on save.

    Raises:
        ValidationError: For anything that is not a number, for NaN or
            infinity, and for values finer than ``places``.
    """
    try:
        number = Decimal(str(value))
    except (ArithmeticError, ValueError, TypeError):
        raise ValidationError(f"{field} must be a number, got {value!r}", field=field)
    if not number.is_finite():
        raise ValidationError(f"{field} must be a finite number, got {value!r}", field=field)
    if places is not None and decimal_places(number) > places:
        raise ValidationError(
            f"{field} allows at most {places} decimal places, got {value!r}",
            field=field,
            details={"max_decimal_places": places},
        )
    return number
