"""
Recipe views - catalog CRUD and cost breakdowns.
"""
from rest_framework.decorators import action
from rest_framework.response import Response

from core_backend.base.viewsets import BaseViewSet
from cogs.models import Recipe
from cogs.permissions import CanManageCOGS, CanViewCOGS
from cogs.serializers import (
    BatchCostRequestSerializer,
    BatchCostSerializer,
    RecipeCostBreakdownSerializer,
    RecipeCostSummarySerializer,
    RecipeSerializer,
)
from cogs.services import RecipeCostEngine


class RecipeViewSet(BaseViewSet):
    """
    Recipes with nested ingredients.

    GET /api/cogs/recipes/:id/cost/ returns the cost breakdown,
    GET /api/cogs/recipes/summary/ the cost summary of every active recipe.
    """
    queryset = Recipe.objects.all()
    serializer_class = RecipeSerializer
    permission_classes = [CanManageCOGS]
    search_fields = ["name", "description"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name"]

    @action(detail=True, methods=["get"], permission_classes=[CanViewCOGS])
    def cost(self, request, pk=None):
        recipe = self.get_object()
        breakdown = RecipeCostEngine.get_recipe_cost(recipe.pk)
        return Response(RecipeCostBreakdownSerializer(breakdown).data)

    @action(detail=True, methods=["post"], url_path="batch-cost", permission_classes=[CanViewCOGS])
    def batch_cost(self, request, pk=None):
        recipe = self.get_object()
        serializer = BatchCostRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = RecipeCostEngine().calculate_batch_cost(recipe, serializer.validated_data["servings"])
        return Response(BatchCostSerializer(result).data)

    @action(detail=False, methods=["get"], permission_classes=[CanViewCOGS])
    def summary(self, request):
        recipes = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(recipes)
        summaries = RecipeCostEngine().compute_recipes_summary(page if page is not None else recipes)
        data = RecipeCostSummarySerializer(summaries, many=True).data
        if page is not None:
            return self.get_paginated_response(data)
        return Response(data)
