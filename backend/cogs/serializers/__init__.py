"""
COGS serializers package.
"""

# Recipe serializers
from .recipe_serializers import (
    RecipeIngredientSerializer,
    RecipeSerializer,
)

# Cost serializers
from .cost_serializers import (
    BatchCostRequestSerializer,
    BatchCostSerializer,
    IngredientCostSerializer,
    RecipeCostBreakdownSerializer,
    RecipeCostSummarySerializer,
)

__all__ = [
    # Recipes
    'RecipeIngredientSerializer',
    'RecipeSerializer',
    # Costs
    'BatchCostRequestSerializer',
    'BatchCostSerializer',
    'IngredientCostSerializer',
    'RecipeCostBreakdownSerializer',
    'RecipeCostSummarySerializer',
]
