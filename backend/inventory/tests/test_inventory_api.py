"""
Tests for the inventory ledger endpoints.
"""
import pytest
from decimal import Decimal

from inventory.models import MovementType, StockEntry, StockMovement

ENTRY_URL = "/api/inventory/entries/record/"
MOVEMENT_URL = "/api/inventory/movements/record/"
LEVELS_URL = "/api/inventory/stock-levels/"


@pytest.mark.django_db
class TestRecordEntryEndpoint:

    def test_staff_can_receive_stock(self, staff_client, flour, supplier):
        response = staff_client.post(
            ENTRY_URL,
            {"material_id": flour.pk, "quantity": "4", "unit_cost": "9.50", "supplier_id": supplier.pk},
            format="json",
        )
        assert response.status_code == 201
        assert Decimal(response.data["total_cost"]) == Decimal("38")
        assert response.data["supplier_name"] == supplier.name
        assert response.data["received_by_username"] == "manager"

    def test_non_staff_cannot_receive_stock(self, user_client, flour):
        response = user_client.post(
            ENTRY_URL, {"material_id": flour.pk, "quantity": "4", "unit_cost": "10"}, format="json"
        )
        assert response.status_code == 403
        assert StockEntry.objects.count() == 0

    def test_anonymous_rejected(self, api_client, flour):
        response = api_client.post(
            ENTRY_URL, {"material_id": flour.pk, "quantity": "4", "unit_cost": "10"}, format="json"
        )
        assert response.status_code in (401, 403)

    def test_zero_quantity_returns_validation_error(self, staff_client, flour):
        response = staff_client.post(
            ENTRY_URL, {"material_id": flour.pk, "quantity": "0", "unit_cost": "10"}, format="json"
        )
        assert response.status_code == 400
        assert response.data["code"] == "validation_error"
        assert response.data["details"]["field"] == "quantity"


@pytest.mark.django_db
class TestRecordMovementEndpoint:

    def test_record_waste(self, staff_client, stocked_flour):
        response = staff_client.post(
            MOVEMENT_URL,
            {"material_id": stocked_flour.pk, "movement_type": "EXPIRED", "quantity": "1", "reason": "mould"},
            format="json",
        )
        assert response.status_code == 201
        assert Decimal(response.data["ledger_delta"]) == Decimal("-1")

    def test_over_debit_returns_conflict(self, staff_client, stocked_flour):
        """Test the structured body for an insufficient stock error."""
        response = staff_client.post(
            MOVEMENT_URL,
            {"material_id": stocked_flour.pk, "movement_type": "OUT", "quantity": "25"},
            format="json",
        )
        assert response.status_code == 409
        assert response.data["status"] == "error"
        assert response.data["code"] == "insufficient_stock"
        assert response.data["details"]["material_id"] == stocked_flour.pk
        assert Decimal(response.data["details"]["requested"]) == Decimal("25")
        assert StockMovement.objects.count() == 0

    def test_transfer_not_accepted_here(self, staff_client, stocked_flour):
        response = staff_client.post(
            MOVEMENT_URL,
            {"material_id": stocked_flour.pk, "movement_type": MovementType.TRANSFER, "quantity": "1"},
            format="json",
        )
        assert response.status_code == 400


@pytest.mark.django_db
class TestStockLevelEndpoints:

    def test_list_levels(self, user_client, stocked_flour, milk):
        response = user_client.get(LEVELS_URL)
        assert response.status_code == 200
        by_name = {row["material_name"]: row for row in response.data}
        assert Decimal(by_name["Flour"]["available_units_quantity"]) == Decimal("10")
        assert Decimal(by_name["Flour"]["available_base_quantity"]) == Decimal("10000")
        assert by_name["Milk"]["is_low_stock"] is True

    def test_low_stock_filter(self, user_client, stocked_flour, milk):
        response = user_client.get(LEVELS_URL, {"low_stock": "true"})
        names = [row["material_name"] for row in response.data]
        assert names == ["Milk"]

    def test_level_detail(self, user_client, stocked_flour):
        response = user_client.get(f"{LEVELS_URL}{stocked_flour.pk}/")
        assert response.status_code == 200
        assert response.data["material_id"] == stocked_flour.pk
        assert response.data["base_unit"] == "grams"

    def test_unknown_material_detail(self, user_client, db):
        response = user_client.get(f"{LEVELS_URL}999999/")
        assert response.status_code == 400
        assert response.data["code"] == "validation_error"


@pytest.mark.django_db
class TestLedgerHistoryEndpoints:

    def test_entries_are_read_only(self, staff_client, stocked_flour):
        response = staff_client.get("/api/inventory/entries/")
        assert response.status_code == 200
        assert response.data["count"] == 1

        entry_id = response.data["results"][0]["id"]
        assert staff_client.delete(f"/api/inventory/entries/{entry_id}/").status_code == 405

    def test_movements_filtered_by_section(self, staff_client, kitchen_flour, kitchen, bar):
        response = staff_client.get("/api/inventory/movements/", {"section": kitchen.pk})
        assert response.data["count"] == 1
        assert response.data["results"][0]["movement_type"] == MovementType.OUT

        response = staff_client.get("/api/inventory/movements/", {"section": bar.pk})
        assert response.data["count"] == 0
