"""カート追加ユースケース."""
from storefront.domain.services import CartStateEngine
from storefront.domain.value_objects import Identity

from ._identifiers import parse_product
from .get_cart import CartResult, build_cart_result


class AddToCartUseCase:
    """カートに商品を追加するユースケース."""

    def __init__(self, engine: CartStateEngine) -> None:
        """初期化.

        Args:
            engine: カート状態エンジン
        """
        self._engine = engine

    def execute(
        self,
        identity: Identity,
        product_id: str,
        quantity: int,
        catalog_id: str | None = None,
    ) -> CartResult:
        """商品をカートに追加する.

        同じ商品・カタログの行が既にあれば数量を加算する。

        Args:
            identity: リクエストの主体
            product_id: 商品ID
            quantity: 追加数量
            catalog_id: カタログID

        Returns:
            追加後のカート

        Raises:
            NoIdentityError: 匿名の場合
            CartValidationError: 入力が不正な場合
            CartConflictError: 書き込み競合が解消しなかった場合
        """
        pid, cid = parse_product(product_id, catalog_id)
        cart = self._engine.add_item(identity, pid, quantity, cid)
        return build_cart_result(cart)
