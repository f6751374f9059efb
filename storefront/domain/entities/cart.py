"""カート集約ルート."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..identifiers import CatalogId, OwnerKey, ProductId
from ..value_objects import Money

from .cart_item import CartItem


@dataclass
class Cart:
    """1つの所有者キーに属するカート（集約ルート）.

    行は (product_id, catalog_id) で一意。数量が0以下になった行は保持せず削除する。
    version は永続化のたびに1つ進み、楽観的排他制御に使う。
    """

    owner_key: OwnerKey
    _items: list[CartItem] = field(default_factory=list)
    version: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(cls, owner_key: OwnerKey) -> Cart:
        """新しい空のカートを作成する."""
        now = datetime.now(timezone.utc)
        return cls(
            owner_key=owner_key,
            _items=[],
            version=0,
            created_at=now,
            updated_at=now,
        )

    def add_item(
        self,
        product_id: ProductId,
        quantity: int,
        catalog_id: CatalogId | None = None,
        unit_price: Money | None = None,
    ) -> CartItem:
        """行を追加する（同じ組が既にあれば数量を加算する）."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError("Quantity to add must be a positive integer")

        index = self._index_of(product_id, catalog_id)
        if index is None:
            item = CartItem(
                product_id=product_id,
                catalog_id=catalog_id,
                quantity=quantity,
                unit_price=unit_price,
            )
            self._items.append(item)
        else:
            current = self._items[index]
            item = current.with_quantity(current.quantity + quantity)
            self._items[index] = item
        self._touch()
        return item

    def set_quantity(
        self,
        product_id: ProductId,
        quantity: int,
        catalog_id: CatalogId | None = None,
        unit_price: Money | None = None,
    ) -> bool:
        """行の数量を絶対値で設定する.

        0以下は行の削除、存在しない行への正の数量は追加として扱う。

        Returns:
            カートが変化した場合True
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError("Quantity must be an integer")

        if quantity <= 0:
            return self.remove_item(product_id, catalog_id)

        index = self._index_of(product_id, catalog_id)
        if index is None:
            self.add_item(product_id, quantity, catalog_id, unit_price)
            return True

        current = self._items[index]
        if current.quantity == quantity:
            return False
        self._items[index] = current.with_quantity(quantity)
        self._touch()
        return True

    def remove_item(self, product_id: ProductId, catalog_id: CatalogId | None = None) -> bool:
        """行を削除する（存在しない場合は何もしない）."""
        index = self._index_of(product_id, catalog_id)
        if index is None:
            return False
        self._items.pop(index)
        self._touch()
        return True

    def clear(self) -> bool:
        """全行を削除する."""
        if not self._items:
            return False
        self._items.clear()
        self._touch()
        return True

    def merge_items(self, incoming: list[CartItem], max_line_quantity: int) -> int:
        """他カートの行を加算方式で取り込む.

        一致する行があれば数量を加算し、上限値で切り詰める。
        一致しなければ行をそのままコピーする。

        Returns:
            取り込んだ行数
        """
        merged = 0
        for guest_item in incoming:
            index = self._index_of(guest_item.product_id, guest_item.catalog_id)
            if index is None:
                self._items.append(
                    guest_item.with_quantity(min(guest_item.quantity, max_line_quantity))
                )
            else:
                current = self._items[index]
                total = min(current.quantity + guest_item.quantity, max_line_quantity)
                self._items[index] = current.with_quantity(total)
            merged += 1
        if merged:
            self._touch()
        return merged

    def replace_items(self, items: list[CartItem]) -> None:
        """行の一覧を丸ごと差し替える（マージの巻き戻し用）."""
        self._items = list(items)
        self._touch()

    def get_items(self) -> list[CartItem]:
        """アイテムのリストを取得（防御的コピー）."""
        return list(self._items)

    def get_item(self, product_id: ProductId, catalog_id: CatalogId | None = None) -> CartItem | None:
        """指定の組の行を取得する."""
        index = self._index_of(product_id, catalog_id)
        if index is None:
            return None
        return self._items[index]

    def get_item_count(self) -> int:
        """行数を取得する."""
        return len(self._items)

    def get_total_quantity(self) -> int:
        """全行の数量の合計を取得する."""
        return sum(item.quantity for item in self._items)

    def get_total_amount(self) -> Money:
        """価格スナップショットに基づく合計金額を計算する."""
        total = Money.zero()
        for item in self._items:
            total = total.add(item.get_amount())
        return total

    def is_empty(self) -> bool:
        """カートが空か判定する."""
        return len(self._items) == 0

    def _index_of(self, product_id: ProductId, catalog_id: CatalogId | None) -> int | None:
        for i, item in enumerate(self._items):
            if item.matches(product_id, catalog_id):
                return i
        return None

    def _touch(self) -> None:
        self.updated_at = datetime.now(timezone.utc)
