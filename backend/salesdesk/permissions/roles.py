# Overview: Role names and the permissions each role carries.

from .definitions import PERMISSION_DEFINITIONS

ROLE_ADMIN = "admin"
ROLE_SALES_STAFF = "sales_staff"

ROLES = (ROLE_ADMIN, ROLE_SALES_STAFF)

# Admin has every permission; sales staff can record sales and read the rest.
DEFAULT_ROLE_PERMISSIONS = {
    ROLE_ADMIN: frozenset(perm[0] for perm in PERMISSION_DEFINITIONS),
    ROLE_SALES_STAFF: frozenset({
        "VIEW_PRODUCTS",
        "VIEW_SALES",
        "CREATE_SALE",
        "VIEW_DASHBOARD",
    }),
}
