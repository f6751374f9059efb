"""カート削除ユースケース."""
from storefront.domain.services import CartStateEngine
from storefront.domain.value_objects import Identity

from ._identifiers import parse_product
from .get_cart import CartResult, build_cart_result


class RemoveFromCartUseCase:
    """カートから行を削除するユースケース."""

    def __init__(self, engine: CartStateEngine) -> None:
        """初期化.

        Args:
            engine: カート状態エンジン
        """
        self._engine = engine

    def execute(self, identity: Identity, product_id: str, catalog_id: str | None = None) -> CartResult:
        """行を削除する（存在しなければ何もしない）."""
        pid, cid = parse_product(product_id, catalog_id)
        return build_cart_result(self._engine.remove_item(identity, pid, cid))
