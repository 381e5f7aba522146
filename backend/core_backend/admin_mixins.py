"""
Admin mixins for archiving and append-only models.
"""

from django.contrib import admin
from django.contrib import messages


class ArchivingAdminMixin:
    """
    Admin mixin for models using SoftDeleteMixin.

    - Shows archived records too (admins should see everything)
    - Replaces the delete action with archive/unarchive actions
    """

    actions = ['archive_selected', 'unarchive_selected']

    def get_queryset(self, request):
        if hasattr(self.model, 'all_objects'):
            return self.model.all_objects.all()
        return super().get_queryset(request)

    def get_list_filter(self, request):
        list_filter = list(super().get_list_filter(request))
        if hasattr(self.model, 'is_active') and 'is_active' not in list_filter:
            list_filter.insert(0, 'is_active')
        return list_filter

    def get_actions(self, request):
        actions = super().get_actions(request)
        if 'delete_selected' in actions:
            del actions['delete_selected']
        return actions

    def get_readonly_fields(self, request, obj=None):
        readonly_fields = list(super().get_readonly_fields(request, obj))
        for field in ('archived_at', 'archived_by'):
            if field not in readonly_fields:
                readonly_fields.append(field)
        return readonly_fields

    @admin.action(description='Archive selected items')
    def archive_selected(self, request, queryset):
        count = queryset.filter(is_active=True).archive(archived_by=request.user)
        if count == 0:
            self.message_user(request, "No active records selected.", level=messages.WARNING)
            return
        self.message_user(
            request,
            f"Successfully archived {count} {queryset.model._meta.verbose_name_plural}.",
            level=messages.SUCCESS
        )

    @admin.action(description='Unarchive selected items')
    def unarchive_selected(self, request, queryset):
        count = queryset.filter(is_active=False).unarchive()
        if count == 0:
            self.message_user(request, "No archived records selected.", level=messages.WARNING)
            return
        self.message_user(
            request,
            f"Successfully unarchived {count} {queryset.model._meta.verbose_name_plural}.",
            level=messages.SUCCESS
        )


class AppendOnlyAdminMixin:
    """
    Admin mixin for ledger history (entries, movements, consumptions).

    Rows are written only by the services, so the admin is view-only.
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
