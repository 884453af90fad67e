"""
Permission classes for role-based access control.

Role is read from request.user (authenticated via JWT).
Role is NEVER read from request body, query parameters, or headers.

These classes are a coarse first gate at the view layer; the per-entity
decision (ownership, access levels) is made by core.authorization in services.
"""

from rest_framework import permissions

from core.principal import ROLE_ADMIN, ROLE_MEMBER


def _has_role(request, roles):
    if not request.user or not request.user.is_authenticated:
        return False

    if not hasattr(request.user, "role"):
        return False

    return request.user.role in roles


class IsMember(permissions.BasePermission):
    """Allow any authenticated community member (MEMBER or ADMIN)."""

    def has_permission(self, request, view):
        return _has_role(request, (ROLE_MEMBER, ROLE_ADMIN))


class IsAdmin(permissions.BasePermission):
    """Allow ADMIN role only."""

    def has_permission(self, request, view):
        return _has_role(request, (ROLE_ADMIN,))


class IsMemberOrPublicRead(permissions.BasePermission):
    """Anonymous callers may issue safe (read) requests; writes need a member."""

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return True
        return _has_role(request, (ROLE_MEMBER, ROLE_ADMIN))
