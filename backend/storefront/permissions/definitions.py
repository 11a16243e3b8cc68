# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- ORDERS --

ORDER_PERMISSIONS = [
    (
        "CREATE_ORDER",
        "Create Order",
        "Check out a cart into a new order",
        PermissionCategory.ORDERS,
    ),
    (
        "VIEW_ALL_ORDERS",
        "View All Orders",
        "View orders placed by any user",
        PermissionCategory.ORDERS,
    ),
    (
        "UPDATE_ORDER_STATUS",
        "Update Order Status",
        "Move an order between pending, paid, shipped and cancelled",
        PermissionCategory.ORDERS,
    ),
    (
        "DELETE_ORDER",
        "Delete Order",
        "Delete an order and its lines (stock is not restored)",
        PermissionCategory.ORDERS,
    ),
]


# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        "MANAGE_PRODUCTS",
        "Manage Products",
        "Create and edit products, including price and stock",
        PermissionCategory.CATALOG,
    ),
    (
        "DELETE_PRODUCT",
        "Delete Product",
        "Delete products that no order references",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_CATEGORIES",
        "Manage Categories",
        "Create, rename and re-parent categories",
        PermissionCategory.CATALOG,
    ),
    (
        "DELETE_CATEGORY",
        "Delete Category",
        "Delete empty categories",
        PermissionCategory.CATALOG,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "VIEW_USERS",
        "View Users",
        "List all user accounts",
        PermissionCategory.USERS,
    ),
    (
        "ASSIGN_ROLES",
        "Assign Roles",
        "Change the role of a user account",
        PermissionCategory.USERS,
    ),
]


PERMISSION_DEFINITIONS = ORDER_PERMISSIONS + CATALOG_PERMISSIONS + USER_PERMISSIONS
