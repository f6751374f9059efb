"""カート取得ユースケース."""
from dataclasses import dataclass
from datetime import datetime

from storefront.domain.entities import Cart
from storefront.domain.services import CartStateEngine
from storefront.domain.value_objects import Identity, Money


@dataclass(frozen=True)
class CartItemDTO:
    """カートアイテムDTO."""

    product_id: str
    catalog_id: str | None
    quantity: int
    unit_price: Money | None
    amount: Money
    added_at: datetime


@dataclass(frozen=True)
class CartResult:
    """カート操作の結果."""

    owner_key: str
    items: list[CartItemDTO]
    item_count: int
    total_quantity: int
    total_amount: Money
    is_empty: bool
    version: int


def build_cart_result(cart: Cart) -> CartResult:
    """カートから結果DTOを組み立てる."""
    items = [
        CartItemDTO(
            product_id=item.product_id.value,
            catalog_id=item.catalog_id.value if item.catalog_id else None,
            quantity=item.quantity,
            unit_price=item.unit_price,
            amount=item.get_amount(),
            added_at=item.added_at,
        )
        for item in cart.get_items()
    ]
    return CartResult(
        owner_key=cart.owner_key.value,
        items=items,
        item_count=cart.get_item_count(),
        total_quantity=cart.get_total_quantity(),
        total_amount=cart.get_total_amount(),
        is_empty=cart.is_empty(),
        version=cart.version,
    )


class GetCartUseCase:
    """カート取得ユースケース."""

    def __init__(self, engine: CartStateEngine) -> None:
        """初期化.

        Args:
            engine: カート状態エンジン
        """
        self._engine = engine

    def execute(self, identity: Identity) -> CartResult:
        """カートを取得する（存在しなければ空のカートを作成する）.

        Args:
            identity: リクエストの主体

        Returns:
            カート

        Raises:
            NoIdentityError: 匿名の場合
        """
        return build_cart_result(self._engine.get_cart(identity))
