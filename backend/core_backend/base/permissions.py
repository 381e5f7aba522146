"""
Permissions for inventory endpoints.

Reads are open to any authenticated user; ledger writes and archiving need a
staff account.
"""

from rest_framework.permissions import BasePermission, SAFE_METHODS


class IsStaffOrReadOnly(BasePermission):
    """Authenticated users may read; only staff may write."""

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return request.user.is_staff


class IsInventoryManager(BasePermission):
    """Staff-only access for stock-moving actions."""

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and request.user.is_staff)


class CanArchiveRecords(IsInventoryManager):
    """
    Permission to archive or unarchive records.
    Only staff can archive records.
    """
    pass
