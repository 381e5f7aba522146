"""
Custom exceptions for section inventory.
"""
from inventory.exceptions import InsufficientStockError


class AggregateInsufficientStockError(InsufficientStockError):
    """
    Raised when a multi-ingredient consumption cannot be fully covered.

    ``failures`` lists every ingredient that fell short, not just the first.
    """

    code = "aggregate_insufficient_stock"

    def __init__(self, section, failures, recipe=None, message=None):
        self.section = section
        self.failures = failures
        self.recipe = recipe
        if message is None:
            names = ", ".join(f["material_name"] for f in failures)
            recipe_info = f" for recipe '{recipe.name}'" if recipe is not None else ""
            message = f"Insufficient stock in section '{section.name}'{recipe_info}: {names}"
        # Skip the single-material message of InsufficientStockError
        super(InsufficientStockError, self).__init__(
            message,
            details={
                "section_id": section.pk,
                "recipe_id": getattr(recipe, "pk", None),
                "failures": [
                    {key: (str(value) if value is not None and not isinstance(value, (int, str)) else value)
                     for key, value in failure.items()}
                    for failure in failures
                ],
            },
        )
