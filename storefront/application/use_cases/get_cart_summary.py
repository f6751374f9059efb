"""カート集計ユースケース."""
from dataclasses import dataclass

from storefront.domain.services import CartStateEngine
from storefront.domain.value_objects import Identity, Money


@dataclass(frozen=True)
class CartSummaryResult:
    """カート集計結果."""

    item_count: int
    total_quantity: int
    total_amount: Money


class GetCartSummaryUseCase:
    """カートの行数・数量・金額を集計するユースケース."""

    def __init__(self, engine: CartStateEngine) -> None:
        """初期化.

        Args:
            engine: カート状態エンジン
        """
        self._engine = engine

    def execute(self, identity: Identity) -> CartSummaryResult:
        """カートを集計する."""
        summary = self._engine.get_cart_summary(identity)
        return CartSummaryResult(
            item_count=summary.item_count,
            total_quantity=summary.total_quantity,
            total_amount=summary.total_amount,
        )
