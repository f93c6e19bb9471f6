"""
Init file for the SQLAlchemy models.
"""

from .cart_items import CartItem
from .products import Product
from .purchases import Purchase
from .reviews import Review
from .users import User

__all__ = [
    "CartItem",
    "Product",
    "Purchase",
    "Review",
    "User",
]
