"""ポートモジュール."""
from .cart_repository import CartAlreadyExistsError, CartRepository, VersionConflictError
from .guest_session_repository import GuestSessionAlreadyExistsError, GuestSessionRepository
from .product_catalog import ProductCatalog, ProductCatalogError
from .token_validator import InvalidCredentialError, TokenValidator

__all__ = [
    "CartAlreadyExistsError",
    "CartRepository",
    "GuestSessionAlreadyExistsError",
    "GuestSessionRepository",
    "InvalidCredentialError",
    "ProductCatalog",
    "ProductCatalogError",
    "TokenValidator",
    "VersionConflictError",
]
