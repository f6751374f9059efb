"""カートクリアユースケース."""
from storefront.domain.services import CartStateEngine
from storefront.domain.value_objects import Identity

from .get_cart import CartResult, build_cart_result


class ClearCartUseCase:
    """カートを全クリアするユースケース."""

    def __init__(self, engine: CartStateEngine) -> None:
        """初期化.

        Args:
            engine: カート状態エンジン
        """
        self._engine = engine

    def execute(self, identity: Identity) -> CartResult:
        """カートを全クリアする."""
        return build_cart_result(self._engine.clear(identity))
