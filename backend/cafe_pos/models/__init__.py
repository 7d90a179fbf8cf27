from .auth import User
from .catalog import Product
from .inventory import InventoryRecord
from .orders import Order, OrderItem

__all__ = [
    'User',
    'Product',
    'InventoryRecord',
    'Order', 'OrderItem',
]
