"""
Tests for the supplier and raw material catalog.
"""
import pytest
from decimal import Decimal

from materials.models import RawMaterial, Supplier

MATERIALS_URL = "/api/materials/raw-materials/"


@pytest.mark.django_db
class TestRawMaterialEndpoints:

    def test_create_pack_material(self, staff_client, supplier):
        payload = {
            "name": "Sugar",
            "category": "condiments",
            "unit": "packs",
            "base_unit": "grams",
            "units_per_pack": "500",
            "unit_cost": "2.00",
            "min_stock_level": "1",
            "max_stock_level": "10",
            "supplier": supplier.pk,
        }
        response = staff_client.post(MATERIALS_URL, payload, format="json")
        assert response.status_code == 201
        assert response.data["holding_unit"] == "grams"
        assert Decimal(response.data["cost_per_holding_unit"]) == Decimal("0.004")

    def test_pack_material_needs_pack_size(self, staff_client):
        payload = {"name": "Rice", "category": "grains", "unit": "packs", "base_unit": "grams", "unit_cost": "3"}
        response = staff_client.post(MATERIALS_URL, payload, format="json")
        assert response.status_code == 400
        assert "units_per_pack" in response.data

    def test_plain_material_drops_pack_fields(self, staff_client):
        payload = {"name": "Oil", "category": "condiments", "unit": "liters", "base_unit": "ml",
                   "units_per_pack": "5", "unit_cost": "4"}
        response = staff_client.post(MATERIALS_URL, payload, format="json")
        assert response.status_code == 201
        material = RawMaterial.objects.get(name="Oil")
        assert material.base_unit == ""
        assert material.units_per_pack is None

    def test_max_below_min(self, staff_client):
        payload = {"name": "Salt", "category": "spices", "unit": "kg", "unit_cost": "1",
                   "min_stock_level": "5", "max_stock_level": "2"}
        response = staff_client.post(MATERIALS_URL, payload, format="json")
        assert response.status_code == 400
        assert "max_stock_level" in response.data

    def test_non_staff_read_only(self, user_client, flour):
        assert user_client.get(MATERIALS_URL).status_code == 200
        response = user_client.patch(f"{MATERIALS_URL}{flour.pk}/", {"unit_cost": "1"}, format="json")
        assert response.status_code == 403

    def test_filter_by_category(self, user_client, flour, milk):
        response = user_client.get(MATERIALS_URL, {"category": "dairy"})
        assert [row["name"] for row in response.data["results"]] == ["Milk"]


@pytest.mark.django_db
class TestArchiving:

    def test_archive_hides_material(self, staff_client, flour):
        response = staff_client.post(f"{MATERIALS_URL}{flour.pk}/archive/")
        assert response.status_code == 200

        assert not RawMaterial.objects.filter(pk=flour.pk).exists()
        archived = RawMaterial.all_objects.get(pk=flour.pk)
        assert archived.archived_by.username == "manager"

        listed = staff_client.get(MATERIALS_URL).data["results"]
        assert flour.pk not in [row["id"] for row in listed]
        listed = staff_client.get(MATERIALS_URL, {"include_archived": "only"}).data["results"]
        assert [row["id"] for row in listed] == [flour.pk]

    def test_unarchive(self, staff_client, flour, staff_user):
        flour.archive(archived_by=staff_user)
        response = staff_client.post(f"{MATERIALS_URL}{flour.pk}/unarchive/")
        assert response.status_code == 200
        assert RawMaterial.objects.filter(pk=flour.pk).exists()

    def test_archive_requires_staff(self, user_client, supplier):
        response = user_client.post(f"/api/materials/suppliers/{supplier.pk}/archive/")
        assert response.status_code == 403
        assert Supplier.objects.filter(pk=supplier.pk).exists()

    def test_delete_archives_instead(self, supplier):
        supplier.delete()
        assert Supplier.all_objects.get(pk=supplier.pk).is_active is False
