"""カート数量更新ユースケース."""
from storefront.domain.services import CartStateEngine
from storefront.domain.value_objects import Identity

from ._identifiers import parse_product
from .get_cart import CartResult, build_cart_result


class UpdateCartItemUseCase:
    """カート行の数量を設定するユースケース."""

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
        """数量を絶対値で設定する（0以下は行の削除）.

        Raises:
            NoIdentityError: 匿名の場合
            CartValidationError: 入力が不正な場合
            CartConflictError: 書き込み競合が解消しなかった場合
        """
        pid, cid = parse_product(product_id, catalog_id)
        cart = self._engine.update_item(identity, pid, quantity, cid)
        return build_cart_result(cart)
