from .base import Base
from .admin_user import AdminUser
from .banner import Banner, FlashBanner
from .cart import Cart
from .cart_item import CartItem
from .customization import CustomizationAxis, CustomizationOption
from .order import Order, OrderItem
from .product import Product

__all__ = [
    "Base",
    "AdminUser",
    "Banner",
    "FlashBanner",
    "Cart",
    "CartItem",
    "CustomizationAxis",
    "CustomizationOption",
    "Order",
    "OrderItem",
    "Product",
]
