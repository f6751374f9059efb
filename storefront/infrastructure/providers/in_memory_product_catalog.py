"""商品カタログのインメモリ実装."""
import threading

from storefront.domain.identifiers import CatalogId, ProductId
from storefront.domain.ports import ProductCatalog
from storefront.domain.value_objects import Money


class InMemoryProductCatalog(ProductCatalog):
    """商品カタログのインメモリ実装（ローカル実行・テスト用）."""

    def __init__(self) -> None:
        """初期化."""
        self._lock = threading.Lock()
        self._products: dict[tuple[str, str | None], Money | None] = {}

    def register(
        self,
        product_id: ProductId,
        price: Money | None = None,
        catalog_id: CatalogId | None = None,
    ) -> None:
        """商品を登録する."""
        with self._lock:
            self._products[self._key(product_id, catalog_id)] = price

    def withdraw(self, product_id: ProductId, catalog_id: CatalogId | None = None) -> None:
        """商品を販売停止にする."""
        with self._lock:
            self._products.pop(self._key(product_id, catalog_id), None)

    def exists(self, product_id: ProductId, catalog_id: CatalogId | None = None) -> bool:
        """商品が存在するか判定する."""
        with self._lock:
            return self._key(product_id, catalog_id) in self._products

    def price_of(self, product_id: ProductId, catalog_id: CatalogId | None = None) -> Money | None:
        """商品の単価を取得する."""
        with self._lock:
            return self._products.get(self._key(product_id, catalog_id))

    @staticmethod
    def _key(product_id: ProductId, catalog_id: CatalogId | None) -> tuple[str, str | None]:
        return (product_id.value, catalog_id.value if catalog_id else None)
