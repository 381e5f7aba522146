from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command

from cogs.models import Recipe
from inventory.services import StockLedger
from materials.models import RawMaterial
from sections.models import SectionInventory


@pytest.mark.django_db
class TestSetupDemoInventory:

    def test_creates_demo_data_through_services(self):
        out = StringIO()
        call_command("setup_demo_inventory", stdout=out)

        flour = RawMaterial.objects.get(name="Flour")
        assert StockLedger.get_stock_level(flour.pk).available_units_quantity == Decimal("8")
        holding = SectionInventory.objects.get(section__name="Kitchen", material=flour)
        assert holding.quantity == Decimal("2000")
        assert Recipe.objects.get(name="Bread").ingredients.count() == 2
        assert "1 low-stock material(s)" in out.getvalue()

    def test_second_run_is_a_no_op(self):
        call_command("setup_demo_inventory", stdout=StringIO())
        out = StringIO()
        call_command("setup_demo_inventory", stdout=out)

        assert "already exist" in out.getvalue()
        assert RawMaterial.all_objects.filter(name="Flour").count() == 1
