"""
COGS services package.
"""
from .costing_service import IngredientCost, RecipeCostBreakdown, RecipeCostEngine

__all__ = [
    'IngredientCost',
    'RecipeCostBreakdown',
    'RecipeCostEngine',
]
