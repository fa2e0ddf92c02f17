"""Models package - exports all SQLAlchemy models."""
from comandas.models.user import User, UserRole
from comandas.models.category import Category
from comandas.models.product import Product
from comandas.models.order import Order, OrderStatus
from comandas.models.order_item import OrderItem
from comandas.models.push_subscription import PushSubscription

__all__ = [
    'User', 'UserRole',
    'Category', 'Product',
    'Order', 'OrderStatus', 'OrderItem',
    'PushSubscription',
]
