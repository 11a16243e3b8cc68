# Overview: Default role -> permission matrix. This table is the whole
# authorization policy; routes never compare role strings directly.

DEFAULT_ROLE_PERMISSIONS = {
    "admin": [
        # Admin gets ALL permissions
        "CREATE_ORDER",
        "VIEW_ALL_ORDERS",
        "UPDATE_ORDER_STATUS",
        "DELETE_ORDER",
        "MANAGE_PRODUCTS",
        "DELETE_PRODUCT",
        "MANAGE_CATEGORIES",
        "DELETE_CATEGORY",
        "VIEW_USERS",
        "ASSIGN_ROLES",
    ],

    "manager": [
        # Manager: runs the catalog and fulfils orders, no destructive ops
        "CREATE_ORDER",
        "VIEW_ALL_ORDERS",
        "UPDATE_ORDER_STATUS",
        "MANAGE_PRODUCTS",
        "MANAGE_CATEGORIES",
    ],

    "customer": [
        "CREATE_ORDER",
    ],
}
