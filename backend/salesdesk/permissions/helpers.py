# Overview: Utility functions for permission lookups and the role policy check.

from .definitions import PERMISSION_DEFINITIONS
from .roles import DEFAULT_ROLE_PERMISSIONS


class PermissionDeniedError(Exception):
    """Raised when a role lacks the permission an operation requires."""

    def __init__(self, role: str | None, permission_code: str):
        super().__init__(f"Role '{role}' lacks permission {permission_code}")
        self.role = role
        self.permission_code = permission_code


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permissions_by_category(category):
    """Get all permissions in a category."""
    return [perm for perm in PERMISSION_DEFINITIONS if perm[3] == category]


def get_permission_definition(code):
    """Get full definition for a permission code."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == code:
            return {
                "code": perm[0],
                "name": perm[1],
                "description": perm[2],
                "category": perm[3],
            }
    return None


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()


def get_role_permissions(role: str | None) -> frozenset:
    return DEFAULT_ROLE_PERMISSIONS.get(role, frozenset())


def has_permission(role: str | None, permission_code: str) -> bool:
    """
    The single authorization decision point.

    Used by the route decorators and by service operations that are
    handed an actor role.
    """
    if not validate_permission_code(permission_code):
        raise ValueError(f"Unknown permission code: {permission_code}")
    return permission_code in get_role_permissions(role)


def require_role_permission(role: str | None, permission_code: str) -> None:
    if not has_permission(role, permission_code):
        raise PermissionDeniedError(role, permission_code)
