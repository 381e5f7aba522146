from django.contrib import admin
from .models import RawMaterial, Supplier
from core_backend.admin_mixins import ArchivingAdminMixin


@admin.register(Supplier)
class SupplierAdmin(ArchivingAdminMixin, admin.ModelAdmin):
    list_display = ("name", "contact_name", "email", "phone")
    search_fields = ("name", "contact_name", "email")


@admin.register(RawMaterial)
class RawMaterialAdmin(ArchivingAdminMixin, admin.ModelAdmin):
    list_display = ("name", "category", "unit", "unit_cost", "min_stock_level", "max_stock_level")
    list_filter = ("category", "unit")
    search_fields = ("name",)
    autocomplete_fields = ("supplier",)
    fieldsets = (
        (None, {
            'fields': ('name', 'description', 'category', 'supplier')
        }),
        ('Units', {
            'fields': ('unit', 'base_unit', 'units_per_pack'),
            'description': 'Base unit and units per pack are only used for materials bought in packs or boxes.'
        }),
        ('Cost & Thresholds', {
            'fields': ('unit_cost', 'min_stock_level', 'max_stock_level')
        }),
    )
