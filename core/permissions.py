"""
Custom permissions for the Civic Platform.

This module contains DRF permission classes for:
- Role checks (staff/admin moderation, admin-only management)
- Object-level authorship checks with moderator override
"""

from rest_framework import permissions


def user_role(user):
    if not user or not user.is_authenticated:
        return None
    return getattr(user, 'role', None)


class IsStaffOrAdmin(permissions.BasePermission):
    """
    Permission for moderation endpoints: staff and admin roles only.
    """
    message = 'Staff or admin role required.'

    def has_permission(self, request, view):
        return user_role(request.user) in ('staff', 'admin')


class IsAdminRole(permissions.BasePermission):
    """
    Permission for administrative changes such as role assignment.
    """
    message = 'Admin role required.'

    def has_permission(self, request, view):
        return user_role(request.user) == 'admin'


class IsAuthorOrModerator(permissions.BasePermission):
    """
    Anyone authenticated may read; only the author (or staff/admin) may write.

    The owning user is looked up on `author` or, for events, `organizer`.
    """

    def has_object_permission(self, request, view, obj):
        # Read permissions for any request
        if request.method in permissions.SAFE_METHODS:
            return True

        if user_role(request.user) in ('staff', 'admin'):
            return True

        owner = getattr(obj, 'author', None) or getattr(obj, 'organizer', None)
        return owner == request.user
