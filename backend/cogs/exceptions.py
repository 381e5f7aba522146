"""
Custom exceptions for recipe costing.
"""
from rest_framework import status

from core_backend.exceptions import InventoryCoreError


class RecipeNotFoundError(InventoryCoreError):
    """Raised when a recipe id does not resolve to a recipe."""

    code = "recipe_not_found"
    http_status = status.HTTP_404_NOT_FOUND

    def __init__(self, recipe_id, message=None):
        self.recipe_id = recipe_id
        if message is None:
            message = f"No recipe found with id {recipe_id}"
        super().__init__(message, details={"recipe_id": recipe_id})
