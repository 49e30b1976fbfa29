# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_PRODUCTS",
        "View Products",
        "View the product catalogue with prices and stock levels",
        PermissionCategory.INVENTORY,
    ),
    (
        "MANAGE_PRODUCTS",
        "Manage Products",
        "Create, edit and delete products, including manual stock corrections",
        PermissionCategory.INVENTORY,
    ),
]

# -- SALES --

SALES_PERMISSIONS = [
    (
        "VIEW_SALES",
        "View Sales",
        "View the sales log",
        PermissionCategory.SALES,
    ),
    (
        "CREATE_SALE",
        "Record Sale",
        "Record new sales (decrements stock)",
        PermissionCategory.SALES,
    ),
    (
        "MANAGE_SALES",
        "Manage Sales",
        "Amend or delete recorded sales (adjusts stock)",
        PermissionCategory.SALES,
    ),
]

# -- REPORTS --

REPORT_PERMISSIONS = [
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "View sales counts and low-stock alerts",
        PermissionCategory.REPORTS,
    ),
    (
        "VIEW_FINANCIALS",
        "View Financials",
        "View revenue, profit and profit trends",
        PermissionCategory.REPORTS,
    ),
    (
        "VIEW_INSIGHTS",
        "View AI Insights",
        "Generate AI sales insights from products and sales",
        PermissionCategory.REPORTS,
    ),
]

# -- USERS --

USER_PERMISSIONS = [
    (
        "VIEW_USERS",
        "View Users",
        "View user accounts and roles",
        PermissionCategory.USERS,
    ),
    (
        "MANAGE_USERS",
        "Manage Users",
        "Create, edit and delete user accounts",
        PermissionCategory.USERS,
    ),
]


PERMISSION_DEFINITIONS = (
    INVENTORY_PERMISSIONS
    + SALES_PERMISSIONS
    + REPORT_PERMISSIONS
    + USER_PERMISSIONS
)
