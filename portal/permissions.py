"""
Role based permission classes for the portal API.

Every class also refuses users that still have to replace their
generated password; only the password change endpoint is reachable
for them.
"""
from __future__ import annotations

from rest_framework.permissions import BasePermission, SAFE_METHODS

from .models import User

ADMIN_ROLES = {User.ROLE_ADMIN}
STAFF_ROLES = {User.ROLE_ADMIN, User.ROLE_DOCTOR, User.ROLE_NURSE}
ALL_ROLES = {User.ROLE_ADMIN, User.ROLE_DOCTOR, User.ROLE_NURSE, User.ROLE_PATIENT}


class RolePermission(BasePermission):
    roles: frozenset[str] | set[str] = ALL_ROLES
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            return False
        if getattr(user, "must_change_password", False):
            self.message = 'Password change required before using the portal.'
            return False
        return getattr(user, "role", None) in self.roles


class IsClinicUser(RolePermission):
    """Any signed-in portal user."""


class IsAdminRole(RolePermission):
    roles = ADMIN_ROLES


class IsDoctorOrAdmin(RolePermission):
    roles = {User.ROLE_ADMIN, User.ROLE_DOCTOR}


class IsStaffRole(RolePermission):
    """Admin, doctor or nurse."""
    roles = STAFF_ROLES


class IsAdminOrReadOnly(RolePermission):
    """Reads for any portal user, writes for administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        if not super().has_permission(request, view):
            return False
        return request.method in SAFE_METHODS or request.user.role in ADMIN_ROLES
