"""識別子モジュール."""
from .catalog_id import CatalogId
from .guest_token import GuestToken
from .owner_key import OwnerKey
from .product_id import ProductId
from .user_id import UserId

__all__ = [
    "CatalogId",
    "GuestToken",
    "OwnerKey",
    "ProductId",
    "UserId",
]
