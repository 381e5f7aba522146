"""
Tests for SectionInventoryManager.
"""
import pytest
from decimal import Decimal

from django.db import connection

from core_backend.exceptions import ValidationError
from inventory.exceptions import InsufficientStockError
from inventory.models import MovementType, StockMovement
from inventory.services import StockLedger
from sections.exceptions import AggregateInsufficientStockError
from sections.models import ConsumptionReason, SectionConsumption, SectionInventory
from sections.services import SectionInventoryManager


def _available_packs(material):
    return StockLedger.get_stock_level(material.pk).available_units_quantity


@pytest.mark.django_db
class TestAssignStock:

    def test_assign_converts_packs_to_grams(self, kitchen_flour, stocked_flour):
        """Test 2 packs land in the kitchen as 2000 g and leave the ledger."""
        assert kitchen_flour.quantity == Decimal("2000")
        assert kitchen_flour.pack_quantity == Decimal("2")
        assert _available_packs(stocked_flour) == Decimal("8")

        movement = StockMovement.objects.get()
        assert movement.movement_type == MovementType.OUT
        assert movement.to_section_id == kitchen_flour.section_id
        assert movement.quantity == Decimal("2")

    def test_second_assignment_adds_to_holding(self, kitchen_flour, kitchen, stocked_flour, staff_user):
        holding = SectionInventoryManager.assign_stock(kitchen.pk, stocked_flour.pk, "0.5", assigned_by=staff_user)
        assert holding.pk == kitchen_flour.pk
        assert holding.quantity == Decimal("2500")

    def test_assign_more_than_ledger_holds(self, stocked_flour, kitchen, staff_user):
        with pytest.raises(InsufficientStockError):
            SectionInventoryManager.assign_stock(kitchen.pk, stocked_flour.pk, 11, assigned_by=staff_user)
        assert not SectionInventory.objects.exists()
        assert _available_packs(stocked_flour) == Decimal("10")

    def test_assign_to_archived_section(self, stocked_flour, kitchen, staff_user):
        kitchen.archive(archived_by=staff_user)
        with pytest.raises(ValidationError):
            SectionInventoryManager.assign_stock(kitchen.pk, stocked_flour.pk, 1, assigned_by=staff_user)

    def test_non_positive_quantity(self, stocked_flour, kitchen, staff_user):
        with pytest.raises(ValidationError):
            SectionInventoryManager.assign_stock(kitchen.pk, stocked_flour.pk, 0, assigned_by=staff_user)

    @pytest.mark.parametrize("quantity", ["NaN", "Infinity"])
    def test_non_finite_quantity(self, stocked_flour, kitchen, staff_user, quantity):
        with pytest.raises(ValidationError):
            SectionInventoryManager.assign_stock(kitchen.pk, stocked_flour.pk, quantity, assigned_by=staff_user)
        assert StockMovement.objects.count() == 0

    def test_plain_unit_material_is_held_in_its_own_unit(self, milk, receive_stock, bar, staff_user):
        receive_stock(milk, 12)
        holding = SectionInventoryManager.assign_stock(bar.pk, milk.pk, 3, assigned_by=staff_user)
        assert holding.quantity == Decimal("3")
        assert holding.pack_quantity is None


@pytest.mark.django_db
class TestRecordConsumption:

    def test_consume_in_base_units(self, kitchen_flour, kitchen, staff_user):
        consumption = SectionInventoryManager.record_consumption(
            kitchen.pk, kitchen_flour.material_id, Decimal("250"), consumed_by=staff_user,
            reason=ConsumptionReason.SELLING, order_id="A-100",
        )
        kitchen_flour.refresh_from_db()
        assert kitchen_flour.quantity == Decimal("1750")
        assert consumption.quantity == Decimal("250")
        assert consumption.order_id == "A-100"

    def test_consumption_does_not_touch_ledger(self, kitchen_flour, kitchen, staff_user, stocked_flour):
        SectionInventoryManager.record_consumption(kitchen.pk, stocked_flour.pk, 100, consumed_by=staff_user)
        assert _available_packs(stocked_flour) == Decimal("8")

    def test_over_consumption_leaves_holding_unchanged(self, kitchen_flour, kitchen, staff_user):
        with pytest.raises(InsufficientStockError) as exc_info:
            SectionInventoryManager.record_consumption(
                kitchen.pk, kitchen_flour.material_id, Decimal("2001"), consumed_by=staff_user
            )
        assert exc_info.value.details["section_id"] == kitchen.pk
        assert exc_info.value.details["unit"] == "grams"
        kitchen_flour.refresh_from_db()
        assert kitchen_flour.quantity == Decimal("2000")
        assert not SectionConsumption.objects.exists()

    def test_consume_material_section_does_not_hold(self, bar, flour, staff_user):
        with pytest.raises(InsufficientStockError):
            SectionInventoryManager.record_consumption(bar.pk, flour.pk, 1, consumed_by=staff_user)

    def test_reserved_stock_cannot_be_consumed(self, kitchen_flour, kitchen, staff_user):
        SectionInventoryManager.reserve(kitchen.pk, kitchen_flour.material_id, 1500, reserved_by=staff_user)
        with pytest.raises(InsufficientStockError):
            SectionInventoryManager.record_consumption(kitchen.pk, kitchen_flour.material_id, 600, consumed_by=staff_user)

    def test_unknown_reason(self, kitchen_flour, kitchen, staff_user):
        with pytest.raises(ValidationError):
            SectionInventoryManager.record_consumption(
                kitchen.pk, kitchen_flour.material_id, 1, consumed_by=staff_user, reason="theft"
            )


@pytest.mark.django_db
class TestRecipeConsumption:

    def test_consumes_every_ingredient(self, kitchen_flour, kitchen, bread_recipe, staff_user):
        consumptions = SectionInventoryManager.record_recipe_consumption(
            kitchen.pk, bread_recipe.pk, consumed_by=staff_user, order_id="T-7", servings=2
        )
        assert len(consumptions) == 1
        assert consumptions[0].quantity == Decimal("1000")
        assert consumptions[0].reason == ConsumptionReason.RECIPE
        assert consumptions[0].recipe_id == bread_recipe.pk
        kitchen_flour.refresh_from_db()
        assert kitchen_flour.quantity == Decimal("1000")

    def test_all_or_nothing(self, kitchen_flour, kitchen, bread_recipe, milk, staff_user):
        """Test a shortfall on one ingredient debits none of them."""
        from cogs.models import RecipeIngredient
        RecipeIngredient.objects.create(recipe=bread_recipe, material=milk, quantity=Decimal("250"), unit="ml")

        with pytest.raises(AggregateInsufficientStockError) as exc_info:
            SectionInventoryManager.record_recipe_consumption(kitchen.pk, bread_recipe.pk, consumed_by=staff_user)

        failures = exc_info.value.failures
        assert [f["material_name"] for f in failures] == ["Milk"]
        assert failures[0]["required"] == Decimal("0.25")
        kitchen_flour.refresh_from_db()
        assert kitchen_flour.quantity == Decimal("2000")
        assert not SectionConsumption.objects.exists()

    def test_every_shortfall_is_reported(self, kitchen_flour, kitchen, bread_recipe, milk, staff_user):
        from cogs.models import RecipeIngredient
        RecipeIngredient.objects.create(recipe=bread_recipe, material=milk, quantity=Decimal("1"), unit="liters")

        with pytest.raises(AggregateInsufficientStockError) as exc_info:
            SectionInventoryManager.record_recipe_consumption(
                kitchen.pk, bread_recipe.pk, consumed_by=staff_user, servings=5
            )
        assert {f["material_name"] for f in exc_info.value.failures} == {"Flour", "Milk"}
        assert exc_info.value.code == "aggregate_insufficient_stock"

    def test_archived_recipe(self, kitchen_flour, kitchen, bread_recipe, staff_user):
        bread_recipe.archive(archived_by=staff_user)
        with pytest.raises(ValidationError):
            SectionInventoryManager.record_recipe_consumption(kitchen.pk, bread_recipe.pk, consumed_by=staff_user)


@pytest.mark.django_db
class TestHoldingAdjustments:

    def test_increase_draws_from_ledger(self, kitchen_flour, stocked_flour, staff_user):
        holding = SectionInventoryManager.update_holding(kitchen_flour.pk, "3.5", updated_by=staff_user)
        assert holding.quantity == Decimal("3500")
        assert _available_packs(stocked_flour) == Decimal("6.5")

    def test_decrease_returns_to_ledger(self, kitchen_flour, stocked_flour, staff_user):
        holding = SectionInventoryManager.update_holding(kitchen_flour.pk, "0.5", updated_by=staff_user)
        assert holding.quantity == Decimal("500")
        assert _available_packs(stocked_flour) == Decimal("9.5")

    def test_nan_level_rejected(self, kitchen_flour, staff_user):
        with pytest.raises(ValidationError):
            SectionInventoryManager.update_holding(kitchen_flour.pk, "NaN", updated_by=staff_user)
        kitchen_flour.refresh_from_db()
        assert kitchen_flour.quantity == Decimal("2000")

    def test_cannot_drop_below_reserved(self, kitchen_flour, kitchen, staff_user):
        SectionInventoryManager.reserve(kitchen.pk, kitchen_flour.material_id, 1000, reserved_by=staff_user)
        with pytest.raises(ValidationError):
            SectionInventoryManager.update_holding(kitchen_flour.pk, "0.5", updated_by=staff_user)

    def test_return_unreserved_stock(self, kitchen_flour, kitchen, stocked_flour, staff_user):
        SectionInventoryManager.reserve(kitchen.pk, stocked_flour.pk, 500, reserved_by=staff_user)
        returned = SectionInventoryManager.return_stock(kitchen_flour.pk, returned_by=staff_user)
        assert returned == Decimal("1.5")

        kitchen_flour.refresh_from_db()
        assert kitchen_flour.quantity == Decimal("500")
        assert kitchen_flour.reserved_quantity == Decimal("500")
        assert _available_packs(stocked_flour) == Decimal("9.5")

    def test_return_with_nothing_unreserved(self, kitchen_flour, kitchen, staff_user):
        SectionInventoryManager.reserve(kitchen.pk, kitchen_flour.material_id, 2000, reserved_by=staff_user)
        with pytest.raises(ValidationError):
            SectionInventoryManager.return_stock(kitchen_flour.pk, returned_by=staff_user)

    def test_release_more_than_reserved(self, kitchen_flour, kitchen, staff_user):
        SectionInventoryManager.reserve(kitchen.pk, kitchen_flour.material_id, 100, reserved_by=staff_user)
        with pytest.raises(ValidationError):
            SectionInventoryManager.release(kitchen.pk, kitchen_flour.material_id, 101, released_by=staff_user)
        holding = SectionInventoryManager.release(kitchen.pk, kitchen_flour.material_id, 100, released_by=staff_user)
        assert holding.reserved_quantity == Decimal("0")


@pytest.mark.django_db
class TestTransferBetweenSections:

    def test_transfer_moves_holding_not_ledger(self, kitchen_flour, kitchen, bar, stocked_flour, staff_user):
        source, destination = SectionInventoryManager.transfer_between_sections(
            kitchen.pk, bar.pk, stocked_flour.pk, Decimal("750"), performed_by=staff_user
        )
        assert source.quantity == Decimal("1250")
        assert destination.quantity == Decimal("750")
        assert destination.section_id == bar.pk
        assert _available_packs(stocked_flour) == Decimal("8")

        movement = StockMovement.objects.filter(movement_type=MovementType.TRANSFER).get()
        assert movement.quantity == Decimal("0.75")
        assert movement.ledger_delta == Decimal("0")

    def test_transfer_more_than_held(self, kitchen_flour, kitchen, bar, stocked_flour, staff_user):
        with pytest.raises(InsufficientStockError):
            SectionInventoryManager.transfer_between_sections(
                kitchen.pk, bar.pk, stocked_flour.pk, 2500, performed_by=staff_user
            )
        kitchen_flour.refresh_from_db()
        assert kitchen_flour.quantity == Decimal("2000")

    def test_transfer_to_same_section(self, kitchen_flour, kitchen, stocked_flour, staff_user):
        with pytest.raises(ValidationError):
            SectionInventoryManager.transfer_between_sections(
                kitchen.pk, kitchen.pk, stocked_flour.pk, 1, performed_by=staff_user
            )


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(connection.vendor == "sqlite", reason="SQLite does not support row-level locking")
class TestConcurrentConsumption:

    def test_parallel_consumers_never_overdraw(self, kitchen_flour, kitchen, staff_user):
        """Test two threads racing for the same holding cannot both succeed."""
        import threading

        from django.db import connections

        results = []

        def consume():
            try:
                SectionInventoryManager.record_consumption(
                    kitchen.pk, kitchen_flour.material_id, Decimal("1500"), consumed_by=staff_user
                )
                results.append("ok")
            except InsufficientStockError:
                results.append("short")
            finally:
                connections.close_all()

        threads = [threading.Thread(target=consume) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(results) == ["ok", "short"]
        kitchen_flour.refresh_from_db()
        assert kitchen_flour.quantity == Decimal("500")


@pytest.fixture
def soda(supplier):
    """Soda bought in boxes of 12 bottles."""
    from materials.models import MaterialCategory, RawMaterial
    return RawMaterial.objects.create(
        name="Soda",
        category=MaterialCategory.BEVERAGES,
        unit="boxes",
        base_unit="bottles",
        units_per_pack=Decimal("12"),
        unit_cost=Decimal("6.00"),
        supplier=supplier,
    )


@pytest.fixture
def bar_soda(soda, receive_stock, bar, staff_user):
    """One box assigned to the bar, seven bottles already poured."""
    receive_stock(soda, 1)
    SectionInventoryManager.assign_stock(bar.pk, soda.pk, 1, assigned_by=staff_user)
    SectionInventoryManager.record_consumption(bar.pk, soda.pk, 7, consumed_by=staff_user)
    return SectionInventory.objects.get(section=bar, material=soda)


@pytest.mark.django_db
class TestPartialPackRounding:
    """Bottles that are not a whole number of ledger units neither appear nor vanish."""

    def test_return_keeps_remainder_in_section(self, bar_soda, soda, staff_user):
        returned = SectionInventoryManager.return_stock(bar_soda.pk, returned_by=staff_user)
        assert returned == Decimal("0.416666")

        bar_soda.refresh_from_db()
        assert bar_soda.quantity == Decimal("0.000008")
        assert _available_packs(soda) == Decimal("0.416666")
        assert _available_packs(soda) * 12 + bar_soda.quantity == Decimal("5")

    def test_leftover_too_small_to_return(self, bar_soda, staff_user):
        SectionInventoryManager.return_stock(bar_soda.pk, returned_by=staff_user)
        with pytest.raises(ValidationError):
            SectionInventoryManager.return_stock(bar_soda.pk, returned_by=staff_user)

    def test_lowering_holding_conserves_bottles(self, bar_soda, soda, staff_user):
        holding = SectionInventoryManager.update_holding(bar_soda.pk, "0", updated_by=staff_user)
        assert holding.quantity == Decimal("0.000008")
        assert _available_packs(soda) * 12 + holding.quantity == Decimal("5")

    def test_raising_holding_conserves_bottles(self, bar_soda, soda, receive_stock, staff_user):
        receive_stock(soda, 1)
        holding = SectionInventoryManager.update_holding(bar_soda.pk, "1", updated_by=staff_user)
        # 7 bottles is 0.583333 boxes at ledger precision
        assert _available_packs(soda) == Decimal("0.416667")
        assert holding.quantity == Decimal("11.999996")
        assert _available_packs(soda) * 12 + holding.quantity == Decimal("17")

    def test_transfer_records_rounded_neutral_quantity(self, bar_soda, soda, bar, kitchen, staff_user):
        SectionInventoryManager.transfer_between_sections(bar.pk, kitchen.pk, soda.pk, 5, performed_by=staff_user)
        movement = StockMovement.objects.filter(movement_type=MovementType.TRANSFER).get()
        assert movement.quantity == Decimal("0.416667")
        assert movement.ledger_delta == Decimal("0")
        assert _available_packs(soda) == Decimal("0")

    def test_assignment_finer_than_ledger_rejected(self, soda, receive_stock, bar, staff_user):
        receive_stock(soda, 1)
        with pytest.raises(ValidationError):
            SectionInventoryManager.assign_stock(bar.pk, soda.pk, "0.0833333", assigned_by=staff_user)
        assert _available_packs(soda) == Decimal("1")
