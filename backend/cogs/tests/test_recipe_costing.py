"""
Tests for RecipeCostEngine.
"""
import pytest
from decimal import Decimal

from cogs.exceptions import RecipeNotFoundError
from cogs.models import Recipe, RecipeIngredient
from cogs.services import RecipeCostEngine
from core_backend.exceptions import ValidationError
from materials.models import RawMaterial


@pytest.fixture
def engine():
    return RecipeCostEngine()


@pytest.fixture
def bread_with_milk(bread_recipe, milk):
    RecipeIngredient.objects.create(
        recipe=bread_recipe, material=milk, quantity=Decimal("250"), unit="ml", position=1
    )
    return bread_recipe


@pytest.mark.django_db
class TestCalculateCost:

    def test_bread_cost(self, engine, bread_recipe):
        """Test 500 g of $10/1000 g flour costs $5.00, or $0.50 a serving."""
        breakdown = engine.calculate_cost(bread_recipe)
        assert breakdown.total_cost == Decimal("5.0000")
        assert breakdown.cost_per_serving == Decimal("0.5000")
        assert breakdown.is_approximate is False

        line = breakdown.ingredients[0]
        assert line.unit == "grams"
        assert line.unit_cost == Decimal("0.01")
        assert line.percentage_of_total == Decimal("100")

    def test_percentages_sum_to_hundred(self, engine, bread_with_milk):
        breakdown = engine.calculate_cost(bread_with_milk)
        assert breakdown.total_cost == Decimal("5.3000")
        flour_line, milk_line = breakdown.ingredients
        assert milk_line.quantity == Decimal("0.25")
        assert milk_line.total_cost == Decimal("0.3000")
        assert flour_line.percentage_of_total == Decimal("94.34")
        assert milk_line.percentage_of_total == Decimal("5.66")
        assert sum(i.percentage_of_total for i in breakdown.ingredients) == Decimal("100")

    def test_kilogram_ingredient_on_pack_material(self, engine, flour, staff_user):
        recipe = Recipe.objects.create(name="Pasta", serving_size=Decimal("4"), created_by=staff_user)
        RecipeIngredient.objects.create(recipe=recipe, material=flour, quantity=Decimal("0.4"), unit="kg")
        breakdown = engine.calculate_cost(recipe)
        assert breakdown.ingredients[0].quantity == Decimal("400")
        assert breakdown.total_cost == Decimal("4.0000")
        assert breakdown.cost_per_serving == Decimal("1.0000")

    def test_empty_recipe(self, engine, staff_user):
        recipe = Recipe.objects.create(name="Water", serving_size=Decimal("1"), created_by=staff_user)
        breakdown = engine.calculate_cost(recipe)
        assert breakdown.total_cost == Decimal("0")
        assert breakdown.ingredients == []


@pytest.mark.django_db
class TestGuardedCosting:
    """Bad data yields an approximate result instead of an error."""

    def test_zero_serving_size(self, engine, bread_recipe):
        Recipe.objects.filter(pk=bread_recipe.pk).update(serving_size=0)
        bread_recipe.refresh_from_db()
        breakdown = engine.calculate_cost(bread_recipe)
        assert breakdown.cost_per_serving == breakdown.total_cost
        assert breakdown.is_approximate is True
        assert breakdown.warnings

    def test_invalid_units_per_pack(self, engine, bread_recipe, flour):
        RawMaterial.objects.filter(pk=flour.pk).update(units_per_pack=0)
        breakdown = engine.calculate_cost(bread_recipe)
        assert breakdown.is_approximate is True
        assert breakdown.ingredients[0].unit_cost == Decimal("10.00")
        assert any("units_per_pack" in warning for warning in breakdown.warnings)

    def test_unit_mismatch_costs_line_at_zero(self, engine, bread_with_milk, flour):
        RawMaterial.objects.filter(pk=flour.pk).update(unit="liters", base_unit="", units_per_pack=None)
        breakdown = engine.calculate_cost(bread_with_milk)
        flour_line, milk_line = breakdown.ingredients
        assert flour_line.total_cost == Decimal("0")
        assert flour_line.error
        assert milk_line.total_cost == Decimal("0.3000")
        assert breakdown.total_cost == Decimal("0.3000")
        assert breakdown.is_approximate is True


@pytest.mark.django_db
class TestCachedCosts:

    def test_price_change_refreshes_cached_cost(self, bread_recipe, flour):
        assert RecipeCostEngine.get_recipe_cost(bread_recipe.pk).total_cost == Decimal("5.0000")
        flour.unit_cost = Decimal("20.00")
        flour.save()
        assert RecipeCostEngine.get_recipe_cost(bread_recipe.pk).total_cost == Decimal("10.0000")

    def test_ingredient_change_refreshes_cached_cost(self, bread_recipe):
        assert RecipeCostEngine.get_recipe_cost(bread_recipe.pk).total_cost == Decimal("5.0000")
        ingredient = bread_recipe.ingredients.get()
        ingredient.quantity = Decimal("1000")
        ingredient.save()
        assert RecipeCostEngine.get_recipe_cost(bread_recipe.pk).total_cost == Decimal("10.0000")

    def test_unknown_recipe(self, db):
        with pytest.raises(RecipeNotFoundError):
            RecipeCostEngine.get_recipe_cost(424242)

    def test_summary(self, engine, bread_recipe):
        summary = engine.compute_recipes_summary(Recipe.objects.all())
        assert summary == [{
            "recipe_id": bread_recipe.pk,
            "name": "Bread",
            "serving_size": Decimal("10"),
            "total_cost": Decimal("5.0000"),
            "cost_per_serving": Decimal("0.5000"),
            "ingredient_count": 1,
            "is_approximate": False,
        }]


@pytest.mark.django_db
class TestBatchCost:

    def test_scales_to_servings(self, engine, bread_recipe):
        result = engine.calculate_batch_cost(bread_recipe, 25)
        assert result["batch_multiplier"] == Decimal("2.5")
        assert result["total_cost"] == Decimal("12.5000")
        assert result["ingredients"][0]["quantity"] == Decimal("1250")

    def test_rejects_non_positive_servings(self, engine, bread_recipe):
        with pytest.raises(ValidationError):
            engine.calculate_batch_cost(bread_recipe, 0)


@pytest.mark.django_db
class TestIngredientUnits:

    def test_incompatible_unit_rejected(self, bread_recipe, flour):
        with pytest.raises(ValidationError):
            RecipeIngredient.objects.create(recipe=bread_recipe, material=flour, quantity=Decimal("1"), unit="liters")


@pytest.mark.django_db
class TestCostPrecision:
    """Costs stay exact until they are formatted."""

    @pytest.fixture
    def saffron(self, supplier):
        from materials.models import MaterialCategory
        return RawMaterial.objects.create(
            name="Saffron", category=MaterialCategory.SPICES, unit="grams",
            unit_cost=Decimal("0.00001"), supplier=supplier,
        )

    @pytest.fixture
    def saffron_rice(self, saffron, staff_user):
        recipe = Recipe.objects.create(name="Saffron Rice", serving_size=Decimal("10"), created_by=staff_user)
        for position in range(3):
            RecipeIngredient.objects.create(
                recipe=recipe, material=saffron, quantity=Decimal("5"), unit="grams", position=position
            )
        return recipe

    def test_sub_cent_lines_are_not_rounded_before_summing(self, engine, saffron_rice):
        breakdown = engine.calculate_cost(saffron_rice)
        assert [line.total_cost for line in breakdown.ingredients] == [Decimal("0.00005")] * 3
        assert breakdown.total_cost == Decimal("0.00015")
        assert breakdown.cost_per_serving == Decimal("0.000015")

    def test_batch_cost_is_not_rounded(self, engine, saffron_rice):
        result = engine.calculate_batch_cost(saffron_rice, 30)
        assert result["total_cost"] == Decimal("0.00045")

    def test_serialized_cost_rounds_half_up(self, engine, saffron_rice):
        from cogs.serializers import RecipeCostBreakdownSerializer
        data = RecipeCostBreakdownSerializer(engine.calculate_cost(saffron_rice)).data
        assert data["total_cost"] == "0.0002"
        assert data["cost_per_serving"] == "0.0000"
        assert data["ingredients"][0]["total_cost"] == "0.0001"


@pytest.mark.django_db
class TestPercentageRounding:

    def test_last_share_never_negative(self, engine, tomato, staff_user):
        """Test six shares of 16.665% cannot push the last line below zero."""
        recipe = Recipe.objects.create(name="Passata", serving_size=Decimal("1"), created_by=staff_user)
        RawMaterial.objects.filter(pk=tomato.pk).update(unit_cost=Decimal("1"))
        for position in range(6):
            RecipeIngredient.objects.create(
                recipe=recipe, material=tomato, quantity=Decimal("16.665"), unit="kg", position=position
            )
        RecipeIngredient.objects.create(recipe=recipe, material=tomato, quantity=Decimal("0.01"), unit="kg", position=6)

        breakdown = engine.calculate_cost(recipe)
        shares = [line.percentage_of_total for line in breakdown.ingredients]
        assert shares[:-1] == [Decimal("16.66")] * 6
        assert shares[-1] == Decimal("0.04")
        assert sum(shares) == Decimal("100")
        assert all(share >= 0 for share in shares)

    def test_half_up_kept_when_it_fits(self, engine, bread_with_milk):
        breakdown = engine.calculate_cost(bread_with_milk)
        assert [line.percentage_of_total for line in breakdown.ingredients] == [Decimal("94.34"), Decimal("5.66")]
