"""エンティティモジュール."""
from .cart import Cart
from .cart_item import CartItem
from .guest_session import GuestSession

__all__ = [
    "Cart",
    "CartItem",
    "GuestSession",
]
