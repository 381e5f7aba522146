"""
Recipe costing.

A recipe's cost is derived from the current effective unit cost of each
material it uses:

    ingredient cost = quantity in holding units x cost per holding unit
    total cost      = sum of ingredient costs
    cost / serving  = total cost / serving size

Values are kept at full precision and only rounded when serialized.
Nothing is stored; results are cached per recipe and dropped whenever the
recipe, one of its ingredients or a referenced material changes.
"""
from dataclasses import asdict, dataclass, field
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import List, Optional
import logging

from core_backend.exceptions import ValidationError
from core_backend.utils.decimals import parse_decimal
from core_backend.infrastructure.cache_utils import cache_dynamic_data, invalidate_cache_keys
from cogs.exceptions import RecipeNotFoundError
from cogs.models import Recipe
from measurements.exceptions import UnitMismatchError
from measurements.services import UnitConversionService

logger = logging.getLogger(__name__)

PERCENT_PRECISION = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass
class IngredientCost:
    """Cost of one ingredient line, in the material's holding unit."""
    material_id: int
    material_name: str
    quantity: Decimal
    unit: str
    recipe_quantity: Decimal
    recipe_unit: str
    unit_cost: Decimal
    total_cost: Decimal
    percentage_of_total: Decimal = Decimal("0")
    is_approximate: bool = False
    error: Optional[str] = None


@dataclass
class RecipeCostBreakdown:
    """Complete cost breakdown for a recipe."""
    recipe_id: int
    recipe_name: str
    serving_size: Decimal
    total_cost: Decimal
    cost_per_serving: Decimal
    ingredients: List[IngredientCost] = field(default_factory=list)
    is_approximate: bool = False
    warnings: List[str] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


class RecipeCostEngine:
    """
    Service for computing recipe costs from raw material prices.

    Conversion problems on a single ingredient do not abort the calculation:
    the line is costed at zero, the breakdown is flagged approximate and a
    warning names the ingredient.
    """

    def __init__(self):
        self._conversion_service = UnitConversionService()

    def _cost_ingredient(self, ingredient, warnings) -> IngredientCost:
        material = ingredient.material
        result = IngredientCost(
            material_id=material.pk,
            material_name=material.name,
            quantity=ingredient.quantity,
            unit=ingredient.unit,
            recipe_quantity=ingredient.quantity,
            recipe_unit=ingredient.unit,
            unit_cost=Decimal("0"),
            total_cost=Decimal("0"),
        )

        try:
            result.unit = self._conversion_service.holding_unit(material)
            result.quantity = self._conversion_service.to_holding_units(
                ingredient.quantity, ingredient.unit, material
            )
        except (UnitMismatchError, ValidationError) as e:
            message = f"Cannot cost {material.name}: {e}"
            logger.warning(message)
            warnings.append(message)
            result.is_approximate = True
            result.error = str(e)
            return result

        unit_cost = self._conversion_service.effective_unit_cost(material)
        if unit_cost.is_approximate:
            warnings.append(unit_cost.warning)
            result.is_approximate = True

        result.unit_cost = unit_cost.value
        result.total_cost = result.quantity * unit_cost.value
        return result

    @staticmethod
    def _apply_percentages(ingredients, total_cost):
        """
        Fill percentage_of_total so the column sums to exactly 100.

        Each share is rounded to 2 decimals; the last line takes whatever
        remains. When rounding half up would leave the last line negative,
        the leading shares are rounded down instead. With a zero total every
        share is zero.
        """
        if not ingredients:
            return
        if total_cost == 0:
            for ingredient in ingredients:
                ingredient.percentage_of_total = Decimal("0.00")
            return

        for rounding in (ROUND_HALF_UP, ROUND_DOWN):
            shares = [
                (ingredient.total_cost / total_cost * HUNDRED).quantize(PERCENT_PRECISION, rounding=rounding)
                for ingredient in ingredients[:-1]
            ]
            remainder = HUNDRED - sum(shares, Decimal("0"))
            if remainder >= 0:
                break

        for ingredient, share in zip(ingredients, shares):
            ingredient.percentage_of_total = share
        ingredients[-1].percentage_of_total = remainder

    def calculate_cost(self, recipe) -> RecipeCostBreakdown:
        """
        Compute the full cost breakdown of a recipe.

        Args:
            recipe: The Recipe instance.

        Returns:
            RecipeCostBreakdown with per-ingredient lines.
        """
        warnings = []
        ingredients = [
            self._cost_ingredient(ingredient, warnings)
            for ingredient in recipe.ingredients.select_related("material").order_by("position", "id")
        ]
        total_cost = sum((i.total_cost for i in ingredients), Decimal("0"))
        self._apply_percentages(ingredients, total_cost)

        is_approximate = any(i.is_approximate for i in ingredients)
        serving_size = Decimal(str(recipe.serving_size or 0))
        if serving_size > 0:
            cost_per_serving = total_cost / serving_size
        else:
            message = f"Recipe '{recipe.name}' has serving size {serving_size}; using total cost per serving"
            logger.warning(message)
            warnings.append(message)
            cost_per_serving = total_cost
            is_approximate = True

        return RecipeCostBreakdown(
            recipe_id=recipe.pk,
            recipe_name=recipe.name,
            serving_size=serving_size,
            total_cost=total_cost,
            cost_per_serving=cost_per_serving,
            ingredients=ingredients,
            is_approximate=is_approximate,
            warnings=warnings,
        )

    @staticmethod
    def get_recipe_cost(recipe_id) -> RecipeCostBreakdown:
        """Cached breakdown for a recipe id."""
        return _cached_recipe_cost(int(recipe_id))

    @staticmethod
    def invalidate(*recipe_ids):
        keys = [_cached_recipe_cost.cache_key_for(int(recipe_id)) for recipe_id in recipe_ids]
        return invalidate_cache_keys(*keys)

    def compute_recipes_summary(self, recipes) -> List[dict]:
        """
        Cost summaries for several recipes.

        Args:
            recipes: Queryset or list of Recipe instances.
        """
        summaries = []
        for recipe in recipes:
            breakdown = self.get_recipe_cost(recipe.pk)
            summaries.append({
                "recipe_id": breakdown.recipe_id,
                "name": breakdown.recipe_name,
                "serving_size": breakdown.serving_size,
                "total_cost": breakdown.total_cost,
                "cost_per_serving": breakdown.cost_per_serving,
                "ingredient_count": len(breakdown.ingredients),
                "is_approximate": breakdown.is_approximate,
            })
        return summaries

    def calculate_batch_cost(self, recipe, servings) -> dict:
        """
        Scale a recipe to ``servings`` and return the ingredient quantities and cost.
        """
        servings = parse_decimal(servings, "servings")
        if servings <= 0:
            raise ValidationError("servings must be greater than zero", field="servings")

        breakdown = self.calculate_cost(recipe)
        if breakdown.serving_size > 0:
            multiplier = servings / breakdown.serving_size
        else:
            multiplier = servings

        return {
            "recipe_id": breakdown.recipe_id,
            "name": breakdown.recipe_name,
            "servings": servings,
            "batch_multiplier": multiplier,
            "total_cost": breakdown.total_cost * multiplier,
            "cost_per_serving": breakdown.cost_per_serving,
            "ingredients": [
                {
                    "material_id": ingredient.material_id,
                    "material_name": ingredient.material_name,
                    "quantity": ingredient.quantity * multiplier,
                    "unit": ingredient.unit,
                    "total_cost": ingredient.total_cost * multiplier,
                }
                for ingredient in breakdown.ingredients
            ],
            "is_approximate": breakdown.is_approximate,
            "warnings": breakdown.warnings,
        }


@cache_dynamic_data(timeout=60, timeout_setting="COGS_RECIPE_COST_CACHE_TIMEOUT")
def _cached_recipe_cost(recipe_id) -> RecipeCostBreakdown:
    recipe = Recipe.all_objects.filter(pk=recipe_id).first()
    if recipe is None:
        raise RecipeNotFoundError(recipe_id)
    return RecipeCostEngine().calculate_cost(recipe)
