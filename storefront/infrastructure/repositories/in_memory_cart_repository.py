"""カートリポジトリのインメモリ実装."""
import copy
import threading
from datetime import datetime

from storefront.domain.entities import Cart
from storefront.domain.identifiers import OwnerKey
from storefront.domain.ports import CartAlreadyExistsError, CartRepository, VersionConflictError


class InMemoryCartRepository(CartRepository):
    """カートリポジトリのインメモリ実装.

    保存・取得のたびにコピーを受け渡し、呼び出し側の変更が保存内容に漏れないようにする。
    """

    def __init__(self) -> None:
        """初期化."""
        self._lock = threading.Lock()
        self._carts: dict[str, Cart] = {}

    def find_by_owner_key(self, owner_key: OwnerKey) -> Cart | None:
        """所有者キーで検索する."""
        with self._lock:
            cart = self._carts.get(owner_key.value)
            return copy.deepcopy(cart) if cart is not None else None

    def add(self, cart: Cart) -> None:
        """新しいカートを登録する."""
        with self._lock:
            if cart.owner_key.value in self._carts:
                raise CartAlreadyExistsError(cart.owner_key)
            self._carts[cart.owner_key.value] = copy.deepcopy(cart)

    def save(self, cart: Cart) -> Cart:
        """バージョンが一致する場合のみ保存する."""
        with self._lock:
            stored = self._carts.get(cart.owner_key.value)
            if stored is None or stored.version != cart.version:
                raise VersionConflictError(cart.owner_key, cart.version)
            saved = copy.deepcopy(cart)
            saved.version = cart.version + 1
            self._carts[cart.owner_key.value] = saved
            return copy.deepcopy(saved)

    def delete(self, owner_key: OwnerKey) -> None:
        """カートを削除する."""
        with self._lock:
            self._carts.pop(owner_key.value, None)

    def find_guest_carts_updated_before(self, threshold: datetime, limit: int) -> list[Cart]:
        """指定時刻より前に更新されたゲストカートを検索する."""
        with self._lock:
            found = [
                copy.deepcopy(cart)
                for cart in self._carts.values()
                if cart.owner_key.is_guest() and cart.updated_at < threshold
            ]
        return found[:limit]
