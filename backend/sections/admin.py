from django.contrib import admin
from .models import Section, SectionConsumption, SectionInventory
from core_backend.admin_mixins import AppendOnlyAdminMixin, ArchivingAdminMixin


class SectionInventoryInline(admin.TabularInline):
    model = SectionInventory
    extra = 0
    fields = ("material", "quantity", "reserved_quantity", "min_level", "max_level", "last_updated")
    readonly_fields = ("material", "quantity", "reserved_quantity", "last_updated")
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Section)
class SectionAdmin(ArchivingAdminMixin, admin.ModelAdmin):
    list_display = ("name", "section_type", "manager", "created_at")
    list_filter = ("section_type",)
    search_fields = ("name", "description")
    inlines = [SectionInventoryInline]


@admin.register(SectionInventory)
class SectionInventoryAdmin(admin.ModelAdmin):
    """Holdings change only through section operations; thresholds are editable."""
    list_display = ("section", "material", "quantity", "reserved_quantity", "min_level", "last_updated")
    list_filter = ("section",)
    search_fields = ("material__name", "section__name")
    readonly_fields = ("section", "material", "quantity", "reserved_quantity", "last_updated", "updated_by")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(SectionConsumption)
class SectionConsumptionAdmin(AppendOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("section", "material", "quantity", "reason", "recipe", "order_id", "consumed_by", "consumed_at")
    list_filter = ("section", "reason", "consumed_at")
    search_fields = ("material__name", "order_id", "notes")
    date_hierarchy = "consumed_at"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("section", "material", "recipe", "consumed_by")
