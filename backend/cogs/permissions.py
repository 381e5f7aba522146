"""
Permissions for the COGS system.

Recipe costs and margins are sensitive business information. Any signed-in
user may read them; only staff may change recipes.
"""
from rest_framework import permissions


class CanViewCOGS(permissions.BasePermission):
    message = "You do not have permission to view COGS data."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated)


class CanManageCOGS(permissions.BasePermission):
    """
    Permission class for recipe management.

    Safe methods follow CanViewCOGS; writes need a staff account.
    """
    message = "You do not have permission to manage recipes."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in permissions.SAFE_METHODS:
            return True
        return request.user.is_staff
