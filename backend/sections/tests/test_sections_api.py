"""
Tests for the sections endpoints.
"""
import pytest
from decimal import Decimal

from sections.models import SectionInventory


@pytest.mark.django_db
class TestSectionCrud:

    def test_list_sections(self, user_client, kitchen, bar):
        response = user_client.get("/api/sections/")
        assert response.status_code == 200
        assert [row["name"] for row in response.data["results"]] == ["Bar", "Kitchen"]

    def test_staff_creates_section(self, staff_client):
        response = staff_client.post("/api/sections/", {"name": "Pastry", "section_type": "bakery"}, format="json")
        assert response.status_code == 201
        assert response.data["is_active"] is True

    def test_non_staff_cannot_create(self, user_client):
        response = user_client.post("/api/sections/", {"name": "Pastry"}, format="json")
        assert response.status_code == 403


@pytest.mark.django_db
class TestSectionStockActions:

    def test_assign_then_view_inventory(self, staff_client, kitchen, stocked_flour):
        response = staff_client.post(
            f"/api/sections/{kitchen.pk}/assign/", {"material_id": stocked_flour.pk, "quantity": "2"}, format="json"
        )
        assert response.status_code == 201
        assert Decimal(response.data["quantity"]) == Decimal("2000")
        assert response.data["holding_unit"] == "grams"
        assert Decimal(response.data["pack_quantity"]) == Decimal("2")

        response = staff_client.get(f"/api/sections/{kitchen.pk}/inventory/")
        assert len(response.data) == 1
        assert response.data[0]["material_name"] == "Flour"

    def test_assign_requires_staff(self, user_client, kitchen, stocked_flour):
        response = user_client.post(
            f"/api/sections/{kitchen.pk}/assign/", {"material_id": stocked_flour.pk, "quantity": "2"}, format="json"
        )
        assert response.status_code == 403

    def test_consume(self, staff_client, kitchen, kitchen_flour):
        response = staff_client.post(
            f"/api/sections/{kitchen.pk}/consume/",
            {"material_id": kitchen_flour.material_id, "quantity": "250", "reason": "selling", "order_id": "A-1"},
            format="json",
        )
        assert response.status_code == 201
        assert response.data["order_id"] == "A-1"
        kitchen_flour.refresh_from_db()
        assert kitchen_flour.quantity == Decimal("1750")

        history = staff_client.get(f"/api/sections/{kitchen.pk}/consumption/")
        assert history.data["count"] == 1

    def test_over_consume_conflict(self, staff_client, kitchen, kitchen_flour):
        response = staff_client.post(
            f"/api/sections/{kitchen.pk}/consume/",
            {"material_id": kitchen_flour.material_id, "quantity": "5000"},
            format="json",
        )
        assert response.status_code == 409
        assert response.data["code"] == "insufficient_stock"
        assert response.data["details"]["section_id"] == kitchen.pk

    def test_consume_recipe_shortfall(self, staff_client, bar, bread_recipe, stocked_flour):
        response = staff_client.post(
            f"/api/sections/{bar.pk}/consume-recipe/", {"recipe_id": bread_recipe.pk, "servings": "1"}, format="json"
        )
        assert response.status_code == 409
        assert response.data["code"] == "aggregate_insufficient_stock"
        assert response.data["details"]["failures"][0]["material_name"] == "Flour"

    def test_consume_recipe(self, staff_client, kitchen, kitchen_flour, bread_recipe):
        response = staff_client.post(
            f"/api/sections/{kitchen.pk}/consume-recipe/",
            {"recipe_id": bread_recipe.pk, "servings": "1", "order_id": "T-1"},
            format="json",
        )
        assert response.status_code == 201
        assert len(response.data) == 1
        assert response.data[0]["recipe_name"] == "Bread"

    def test_transfer(self, staff_client, kitchen, bar, kitchen_flour):
        response = staff_client.post(
            f"/api/sections/{kitchen.pk}/transfer/",
            {"to_section_id": bar.pk, "material_id": kitchen_flour.material_id, "quantity": "500"},
            format="json",
        )
        assert response.status_code == 200
        assert Decimal(response.data["source"]["quantity"]) == Decimal("1500")
        assert Decimal(response.data["destination"]["quantity"]) == Decimal("500")


@pytest.mark.django_db
class TestHoldingActions:

    def test_set_quantity(self, staff_client, kitchen_flour):
        response = staff_client.post(
            f"/api/sections/inventory/{kitchen_flour.pk}/set-quantity/", {"quantity": "1"}, format="json"
        )
        assert response.status_code == 200
        assert Decimal(response.data["quantity"]) == Decimal("1000")

    def test_reserve_release_and_return(self, staff_client, kitchen_flour):
        url = f"/api/sections/inventory/{kitchen_flour.pk}/"

        response = staff_client.post(f"{url}reserve/", {"quantity": "500"}, format="json")
        assert Decimal(response.data["available_quantity"]) == Decimal("1500")

        response = staff_client.post(f"{url}return/", {}, format="json")
        assert response.status_code == 200
        assert Decimal(response.data["returned_quantity"]) == Decimal("1.5")
        assert response.data["unit"] == "packs"

        response = staff_client.post(f"{url}release/", {"quantity": "500"}, format="json")
        assert Decimal(response.data["reserved_quantity"]) == Decimal("0")
        assert SectionInventory.objects.get(pk=kitchen_flour.pk).quantity == Decimal("500")

    def test_release_too_much(self, staff_client, kitchen_flour):
        response = staff_client.post(
            f"/api/sections/inventory/{kitchen_flour.pk}/release/", {"quantity": "1"}, format="json"
        )
        assert response.status_code == 400
        assert response.data["code"] == "validation_error"
