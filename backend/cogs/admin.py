"""
Django admin configuration for COGS models.
"""
from django.contrib import admin
from core_backend.admin_mixins import ArchivingAdminMixin
from cogs.models import Recipe, RecipeIngredient


class RecipeIngredientInline(admin.TabularInline):
    model = RecipeIngredient
    extra = 1
    fields = ['position', 'material', 'quantity', 'unit', 'notes']
    autocomplete_fields = ['material']
    ordering = ['position']


@admin.register(Recipe)
class RecipeAdmin(ArchivingAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'serving_size', 'created_by', 'updated_at']
    search_fields = ['name', 'description']
    readonly_fields = ['created_by', 'created_at', 'updated_at']
    inlines = [RecipeIngredientInline]

    def save_model(self, request, obj, form, change):
        if not change and obj.created_by_id is None:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)
