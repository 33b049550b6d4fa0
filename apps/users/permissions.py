"""Role-based permission classes shared by the booking and payment APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_admin_user(user) -> bool:
    """Admins are users with role ADMIN, plus Django superusers."""
    if not user or not user.is_authenticated:
        return False
    if getattr(user, "is_superuser", False):
        return True
    return hasattr(user, "is_admin") and user.is_admin()


class IsAdminRole(permissions.BasePermission):
    """Only allow users with the ADMIN role."""

    message = "Admin role required."

    def has_permission(self, request, view) -> bool:  # type: ignore
        return is_admin_user(request.user)


class IsOwnerOrAdmin(permissions.BasePermission):
    """
    Object-level permission: the object's owner or an admin.

    The view declares which attribute path leads to the owner id through
    ``owner_field`` (defaults to ``user_id``).
    """

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        user = request.user
        if not user.is_authenticated:
            return False
        if is_admin_user(user):
            return True

        owner = obj
        for part in getattr(view, "owner_field", "user_id").split("."):
            owner = getattr(owner, part)
        return owner == user.id
