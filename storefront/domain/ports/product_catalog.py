"""商品カタログ参照インターフェース."""
from abc import ABC, abstractmethod

from ..identifiers import CatalogId, ProductId
from ..value_objects import Money


class ProductCatalogError(Exception):
    """商品カタログの参照に失敗したエラー."""

    pass


class ProductCatalog(ABC):
    """外部の商品・カタログ管理への参照口."""

    @abstractmethod
    def exists(self, product_id: ProductId, catalog_id: CatalogId | None = None) -> bool:
        """商品が購入可能な状態で存在するか判定する."""
        pass

    @abstractmethod
    def price_of(self, product_id: ProductId, catalog_id: CatalogId | None = None) -> Money | None:
        """商品の単価を取得する（不明な場合はNone）."""
        pass
