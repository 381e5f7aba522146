"""
Recipe cost serializers - for breakdown and summary responses.

Costs are computed at full precision by RecipeCostEngine; these fields are
the only place they get rounded.
"""
from decimal import ROUND_HALF_UP

from rest_framework import serializers


def cost_field():
    return serializers.DecimalField(max_digits=16, decimal_places=4, rounding=ROUND_HALF_UP)


def quantity_field():
    return serializers.DecimalField(max_digits=24, decimal_places=6, rounding=ROUND_HALF_UP)


class IngredientCostSerializer(serializers.Serializer):
    """Serializer for a single ingredient's cost line."""
    material_id = serializers.IntegerField()
    material_name = serializers.CharField()
    quantity = quantity_field()
    unit = serializers.CharField()
    recipe_quantity = serializers.DecimalField(max_digits=18, decimal_places=6)
    recipe_unit = serializers.CharField()
    unit_cost = serializers.DecimalField(max_digits=20, decimal_places=6, rounding=ROUND_HALF_UP)
    total_cost = cost_field()
    percentage_of_total = serializers.DecimalField(max_digits=6, decimal_places=2)
    is_approximate = serializers.BooleanField()
    error = serializers.CharField(allow_null=True, required=False)


class RecipeCostBreakdownSerializer(serializers.Serializer):
    """
    Complete cost breakdown for a single recipe.

    Used in GET /api/cogs/recipes/:id/cost/
    """
    recipe_id = serializers.IntegerField()
    recipe_name = serializers.CharField()
    serving_size = serializers.DecimalField(max_digits=12, decimal_places=3)
    total_cost = cost_field()
    cost_per_serving = cost_field()
    ingredients = IngredientCostSerializer(many=True)
    is_approximate = serializers.BooleanField()
    warnings = serializers.ListField(child=serializers.CharField(), required=False)


class RecipeCostSummarySerializer(serializers.Serializer):
    recipe_id = serializers.IntegerField()
    name = serializers.CharField()
    serving_size = serializers.DecimalField(max_digits=12, decimal_places=3)
    total_cost = cost_field()
    cost_per_serving = cost_field()
    ingredient_count = serializers.IntegerField()
    is_approximate = serializers.BooleanField()


class BatchCostRequestSerializer(serializers.Serializer):
    servings = serializers.DecimalField(max_digits=12, decimal_places=3, min_value=0)


class BatchIngredientSerializer(serializers.Serializer):
    material_id = serializers.IntegerField()
    material_name = serializers.CharField()
    quantity = quantity_field()
    unit = serializers.CharField()
    total_cost = cost_field()


class BatchCostSerializer(serializers.Serializer):
    """
    A recipe scaled to a number of servings.

    Used in POST /api/cogs/recipes/:id/batch-cost/
    """
    recipe_id = serializers.IntegerField()
    name = serializers.CharField()
    servings = serializers.DecimalField(max_digits=12, decimal_places=3)
    batch_multiplier = serializers.DecimalField(max_digits=18, decimal_places=6, rounding=ROUND_HALF_UP)
    total_cost = cost_field()
    cost_per_serving = cost_field()
    ingredients = BatchIngredientSerializer(many=True)
    is_approximate = serializers.BooleanField()
    warnings = serializers.ListField(child=serializers.CharField(), required=False)
