"""ユースケースモジュール."""
from .add_to_cart import AddToCartUseCase
from .clear_cart import ClearCartUseCase
from .get_cart import CartItemDTO, CartResult, GetCartUseCase, build_cart_result
from .get_cart_summary import CartSummaryResult, GetCartSummaryUseCase
from .migrate_guest_cart import MigrateGuestCartUseCase
from .remove_from_cart import RemoveFromCartUseCase
from .update_cart_item import UpdateCartItemUseCase
from .validate_cart import CartIssueDTO, CartValidationResult, ValidateCartUseCase

__all__ = [
    "AddToCartUseCase",
    "CartIssueDTO",
    "CartItemDTO",
    "CartResult",
    "CartSummaryResult",
    "CartValidationResult",
    "ClearCartUseCase",
    "GetCartSummaryUseCase",
    "GetCartUseCase",
    "MigrateGuestCartUseCase",
    "RemoveFromCartUseCase",
    "UpdateCartItemUseCase",
    "ValidateCartUseCase",
    "build_cart_result",
]
