from .auth import User, ROLE_ADMIN, ROLE_MANAGER, ROLE_CUSTOMER, ROLES
from .catalog import Category, Product
from .orders import Order, OrderLine, ORDER_STATUSES, STATUS_PENDING, STATUS_PAID, STATUS_SHIPPED, STATUS_CANCELLED

__all__ = [
    'User', 'ROLE_ADMIN', 'ROLE_MANAGER', 'ROLE_CUSTOMER', 'ROLES',
    'Category', 'Product',
    'Order', 'OrderLine', 'ORDER_STATUSES',
    'STATUS_PENDING', 'STATUS_PAID', 'STATUS_SHIPPED', 'STATUS_CANCELLED',
]
