from django.contrib import admin

from core_backend.admin_mixins import ArchivingAdminMixin
from .models import Budget, BudgetAllocation


class BudgetAllocationInline(admin.TabularInline):
    model = BudgetAllocation
    extra = 0


@admin.register(Budget)
class BudgetAdmin(ArchivingAdminMixin, admin.ModelAdmin):
    list_display = ("name", "period_type", "start_date", "end_date", "total_budget", "is_active")
    list_filter = ("period_type", "is_active")
    search_fields = ("name", "description")
    date_hierarchy = "start_date"
    readonly_fields = ("created_by", "created_at", "updated_at")
    inlines = [BudgetAllocationInline]

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)
