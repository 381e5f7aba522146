"""
Root conftest.py for all backend tests.

This file makes fixtures available to all test files across all apps.
"""
from decimal import Decimal

import pytest
from django.core.cache import cache


# ============================================================================
# AUTO-USE FIXTURES (Run automatically for every test)
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache_after_test():
    """
    Clear cache after each test to prevent cache pollution.

    Stock levels and recipe costs are cached; a stale entry from a previous
    test would make balances look wrong.
    """
    yield
    cache.clear()


# ============================================================================
# USER AND API CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def user(db):
    from django.contrib.auth import get_user_model
    return get_user_model().objects.create_user(username="cook", password="pass1234")


@pytest.fixture
def staff_user(db):
    from django.contrib.auth import get_user_model
    return get_user_model().objects.create_user(username="manager", password="pass1234", is_staff=True)


@pytest.fixture
def api_client():
    """
    Provide DRF API client for API tests.

    Usage:
        def test_my_api(api_client):
            response = api_client.get('/api/materials/raw-materials/')
            assert response.status_code == 403
    """
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def user_client(api_client, user):
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def staff_client(api_client, staff_user):
    api_client.force_authenticate(user=staff_user)
    return api_client


# ============================================================================
# CATALOG FIXTURES
# ============================================================================

@pytest.fixture
def supplier(db):
    from materials.models import Supplier
    return Supplier.objects.create(name="Fresh Foods Ltd", contact_name="Dana", email="orders@freshfoods.test")


@pytest.fixture
def flour(supplier):
    """Flour bought in packs of 1000 g at $10 a pack."""
    from materials.models import MaterialCategory, RawMaterial
    return RawMaterial.objects.create(
        name="Flour",
        category=MaterialCategory.GRAINS,
        unit="packs",
        base_unit="grams",
        units_per_pack=Decimal("1000"),
        unit_cost=Decimal("10.00"),
        min_stock_level=Decimal("2"),
        max_stock_level=Decimal("20"),
        supplier=supplier,
    )


@pytest.fixture
def milk(supplier):
    from materials.models import MaterialCategory, RawMaterial
    return RawMaterial.objects.create(
        name="Milk",
        category=MaterialCategory.DAIRY,
        unit="liters",
        unit_cost=Decimal("1.20"),
        min_stock_level=Decimal("5"),
        max_stock_level=Decimal("30"),
        supplier=supplier,
    )


@pytest.fixture
def tomato(supplier):
    from materials.models import MaterialCategory, RawMaterial
    return RawMaterial.objects.create(
        name="Tomato",
        category=MaterialCategory.VEGETABLES,
        unit="kg",
        unit_cost=Decimal("2.50"),
        min_stock_level=Decimal("5"),
        max_stock_level=Decimal("25"),
        supplier=supplier,
    )


@pytest.fixture
def kitchen(db):
    from sections.models import Section, SectionType
    return Section.objects.create(name="Kitchen", section_type=SectionType.KITCHEN)


@pytest.fixture
def bar(db):
    from sections.models import Section, SectionType
    return Section.objects.create(name="Bar", section_type=SectionType.BAR)


@pytest.fixture
def bread_recipe(flour, staff_user):
    """Bread: 500 g of flour, ten servings."""
    from cogs.models import Recipe, RecipeIngredient
    recipe = Recipe.objects.create(name="Bread", serving_size=Decimal("10"), created_by=staff_user)
    RecipeIngredient.objects.create(recipe=recipe, material=flour, quantity=Decimal("500"), unit="grams")
    return recipe


# ============================================================================
# LEDGER FIXTURES
# ============================================================================

@pytest.fixture
def receive_stock(staff_user):
    """
    Record a stock entry in the ledger.

    Usage:
        def test_something(receive_stock, flour):
            receive_stock(flour, 10)
    """
    from inventory.services import StockLedger

    def _receive(material, quantity, unit_cost=None, **kwargs):
        return StockLedger.record_entry(
            material=material,
            quantity=Decimal(str(quantity)),
            unit_cost=material.unit_cost if unit_cost is None else Decimal(str(unit_cost)),
            received_by=staff_user,
            **kwargs,
        )

    return _receive


@pytest.fixture
def stocked_flour(flour, receive_stock):
    """Flour with 10 packs in the central ledger."""
    receive_stock(flour, 10)
    return flour


@pytest.fixture
def kitchen_flour(stocked_flour, kitchen, staff_user):
    """Kitchen holding 2 packs (2000 g) of flour."""
    from sections.services import SectionInventoryManager
    return SectionInventoryManager.assign_stock(kitchen.pk, stocked_flour.pk, Decimal("2"), assigned_by=staff_user)
