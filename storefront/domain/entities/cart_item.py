"""カートアイテムエンティティ."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from ..identifiers import CatalogId, ProductId
from ..value_objects import Money


@dataclass(frozen=True)
class CartItem:
    """カート内の1行（商品とカタログの組で一意）."""

    product_id: ProductId
    quantity: int
    catalog_id: CatalogId | None = None
    unit_price: Money | None = None
    added_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """バリデーション."""
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValueError("Quantity must be an integer")
        if self.quantity < 1:
            raise ValueError("Quantity must be at least 1")

    @property
    def line_key(self) -> tuple[ProductId, CatalogId | None]:
        """行の一意キー."""
        return (self.product_id, self.catalog_id)

    def matches(self, product_id: ProductId, catalog_id: CatalogId | None) -> bool:
        """指定の商品・カタログ組と一致するか判定する."""
        return self.product_id == product_id and self.catalog_id == catalog_id

    def with_quantity(self, quantity: int) -> CartItem:
        """数量を差し替えた新しい行を返す."""
        return replace(self, quantity=quantity)

    def get_amount(self) -> Money:
        """小計を計算する（価格スナップショットがない場合はゼロ）."""
        if self.unit_price is None:
            return Money.zero()
        return self.unit_price.multiply(self.quantity)
