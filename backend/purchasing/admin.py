from django.contrib import admin
from .models import PurchaseOrder, PurchaseOrderItem, PurchaseReceipt
from core_backend.admin_mixins import AppendOnlyAdminMixin


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    fields = ("material", "quantity_ordered", "quantity_received", "unit_cost", "line_total")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class PurchaseReceiptInline(admin.TabularInline):
    model = PurchaseReceipt
    extra = 0
    fields = ("receipt_number", "received_date", "received_by", "total_amount", "is_partial")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    """Orders move through PurchaseOrderWorkflow; the admin is read-only."""
    list_display = ("po_number", "supplier", "status", "order_date", "expected_date", "total_amount")
    list_filter = ("status", "order_date")
    search_fields = ("po_number", "supplier__name")
    date_hierarchy = "order_date"
    inlines = [PurchaseOrderItemInline, PurchaseReceiptInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PurchaseReceipt)
class PurchaseReceiptAdmin(AppendOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("receipt_number", "order", "received_date", "received_by", "total_amount", "is_partial")
    search_fields = ("receipt_number", "order__po_number")
