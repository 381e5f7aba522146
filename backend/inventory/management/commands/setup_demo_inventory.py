"""
Django management command to set up demo inventory data.

Creates a supplier, a few raw materials, two sections and a recipe, then
receives stock into the ledger and assigns some of it to the kitchen, all
through the regular services.
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from cogs.models import Recipe, RecipeIngredient
from inventory.services import StockLedger
from materials.models import MaterialCategory, RawMaterial, Supplier
from measurements.models import MeasurementUnit
from sections.models import Section, SectionType
from sections.services import SectionInventoryManager

DEMO_MATERIALS = [
    {
        "name": "Flour",
        "category": MaterialCategory.GRAINS,
        "unit": MeasurementUnit.PACKS,
        "base_unit": MeasurementUnit.GRAMS,
        "units_per_pack": Decimal("1000"),
        "unit_cost": Decimal("10.00"),
        "min_stock_level": Decimal("5"),
        "max_stock_level": Decimal("20"),
        "receive": Decimal("10"),
        "assign": Decimal("2"),
    },
    {
        "name": "Milk",
        "category": MaterialCategory.DAIRY,
        "unit": MeasurementUnit.LITERS,
        "unit_cost": Decimal("1.20"),
        "min_stock_level": Decimal("10"),
        "max_stock_level": Decimal("40"),
        "receive": Decimal("24"),
        "assign": Decimal("6"),
    },
    {
        "name": "Tomato",
        "category": MaterialCategory.VEGETABLES,
        "unit": MeasurementUnit.KILOGRAMS,
        "unit_cost": Decimal("2.50"),
        "min_stock_level": Decimal("8"),
        "max_stock_level": Decimal("25"),
        "receive": Decimal("3"),
        "assign": Decimal("0"),
    },
]


class Command(BaseCommand):
    help = 'Set up demo inventory data for testing'

    def add_arguments(self, parser):
        parser.add_argument(
            '--username',
            default='demo-manager',
            help='Staff user recorded as the actor (created if missing)',
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS('Setting up demo inventory data...'))

        if RawMaterial.all_objects.filter(name__in=[m["name"] for m in DEMO_MATERIALS]).exists():
            self.stdout.write(self.style.WARNING('Demo materials already exist; nothing to do.'))
            return

        with transaction.atomic():
            user, created = get_user_model().objects.get_or_create(
                username=options['username'],
                defaults={'is_staff': True},
            )
            if created:
                user.set_unusable_password()
                user.save(update_fields=['password'])
            self.stdout.write(f'Using actor: {user.username}')

            supplier = Supplier.objects.create(name='Demo Wholesale', contact_name='Demo Contact')
            kitchen = Section.objects.create(name='Kitchen', section_type=SectionType.KITCHEN, manager=user)
            Section.objects.create(name='Bar', section_type=SectionType.BAR)

            materials = {}
            for attrs in DEMO_MATERIALS:
                attrs = dict(attrs)
                receive = attrs.pop('receive')
                assign = attrs.pop('assign')
                material = RawMaterial.objects.create(supplier=supplier, **attrs)
                materials[material.name] = material

                StockLedger.record_entry(
                    material=material,
                    quantity=receive,
                    unit_cost=material.unit_cost,
                    received_by=user,
                    supplier=supplier,
                    notes='Demo opening stock',
                )
                if assign > 0:
                    SectionInventoryManager.assign_stock(kitchen.pk, material.pk, assign, assigned_by=user)
                self.stdout.write(f'  ✓ {material.name}: received {receive} {material.unit}, assigned {assign}')

            bread = Recipe.objects.create(name='Bread', serving_size=Decimal('10'), created_by=user)
            RecipeIngredient.objects.create(
                recipe=bread,
                material=materials['Flour'],
                quantity=Decimal('500'),
                unit=MeasurementUnit.GRAMS,
            )
            RecipeIngredient.objects.create(
                recipe=bread,
                material=materials['Milk'],
                quantity=Decimal('250'),
                unit=MeasurementUnit.MILLILITERS,
                position=1,
            )

        low_stock = StockLedger.get_low_stock_levels()
        self.stdout.write(
            self.style.SUCCESS(
                f'Demo inventory ready: {len(materials)} materials, 2 sections, 1 recipe, '
                f'{len(low_stock)} low-stock material(s)'
            )
        )
