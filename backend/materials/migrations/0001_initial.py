from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Cleared when the record is archived.')),
                ('archived_at', models.DateTimeField(blank=True, null=True)),
                ('name', models.CharField(help_text='Name of the supplier.', max_length=200)),
                ('contact_name', models.CharField(blank=True, max_length=200)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=50)),
                ('address', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('archived_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(app_label)s_%(class)s_archived', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Supplier',
                'verbose_name_plural': 'Suppliers',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='RawMaterial',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(db_index=True, default=True, help_text='Cleared when the record is archived.')),
                ('archived_at', models.DateTimeField(blank=True, null=True)),
                ('name', models.CharField(help_text='Name of the raw material.', max_length=200)),
                ('description', models.TextField(blank=True)),
                ('category', models.CharField(choices=[('meat', 'Meat'), ('vegetables', 'Vegetables'), ('dairy', 'Dairy'), ('beverages', 'Beverages'), ('bread', 'Bread'), ('grains', 'Grains'), ('spices', 'Spices'), ('condiments', 'Condiments'), ('packaging', 'Packaging'), ('other', 'Other')], db_index=True, default='other', max_length=20)),
                ('unit', models.CharField(choices=[('kg', 'Kilograms'), ('grams', 'Grams'), ('liters', 'Liters'), ('ml', 'Milliliters'), ('pieces', 'Pieces'), ('bottles', 'Bottles'), ('packs', 'Packs'), ('boxes', 'Boxes'), ('meters', 'Meters'), ('centimeters', 'Centimeters'), ('square_meters', 'Square Meters'), ('square_centimeters', 'Square Centimeters')], help_text='Unit the material is purchased and counted in.', max_length=20)),
                ('base_unit', models.CharField(blank=True, choices=[('kg', 'Kilograms'), ('grams', 'Grams'), ('liters', 'Liters'), ('ml', 'Milliliters'), ('pieces', 'Pieces'), ('bottles', 'Bottles'), ('packs', 'Packs'), ('boxes', 'Boxes'), ('meters', 'Meters'), ('centimeters', 'Centimeters'), ('square_meters', 'Square Meters'), ('square_centimeters', 'Square Centimeters')], help_text='Unit inside one pack/box. Required when unit is packs or boxes.', max_length=20)),
                ('units_per_pack', models.DecimalField(blank=True, decimal_places=6, help_text='How many base units one pack/box contains.', max_digits=18, null=True)),
                ('unit_cost', models.DecimalField(decimal_places=6, default=0, help_text='Cost of one purchase unit.', max_digits=14)),
                ('min_stock_level', models.DecimalField(decimal_places=6, default=0, help_text='Reorder threshold, in purchase units.', max_digits=18)),
                ('max_stock_level', models.DecimalField(decimal_places=6, default=0, help_text='Target level after reordering, in purchase units.', max_digits=18)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('archived_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='%(app_label)s_%(class)s_archived', to=settings.AUTH_USER_MODEL)),
                ('supplier', models.ForeignKey(blank=True, help_text='Default supplier for reorders.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='materials', to='materials.supplier')),
            ],
            options={
                'verbose_name': 'Raw Material',
                'verbose_name_plural': 'Raw Materials',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['category', 'is_active'], name='rawmat_category_active_idx'), models.Index(fields=['name'], name='rawmat_name_idx')],
            },
        ),
    ]
