from django.contrib import admin
from .models import StockEntry, StockMovement
from core_backend.admin_mixins import AppendOnlyAdminMixin


@admin.register(StockEntry)
class StockEntryAdmin(AppendOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("material", "quantity", "unit_cost", "total_cost", "supplier_name", "received_date", "received_by")
    list_filter = ("received_date", "material__category")
    search_fields = ("material__name", "supplier_name", "batch_number")
    date_hierarchy = "received_date"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("material", "received_by")


@admin.register(StockMovement)
class StockMovementAdmin(AppendOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("material", "movement_type", "quantity", "from_section", "to_section", "reference_id", "performed_by", "created_at")
    list_filter = ("movement_type", "created_at")
    search_fields = ("material__name", "reference_id", "reason")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related(
            "material", "from_section", "to_section", "performed_by"
        )
