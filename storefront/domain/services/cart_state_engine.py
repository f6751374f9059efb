"""主体ごとのカート状態管理."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from ..entities import Cart
from ..identifiers import CatalogId, OwnerKey, ProductId
from ..ports import (
    CartAlreadyExistsError,
    CartRepository,
    ProductCatalog,
    ProductCatalogError,
    VersionConflictError,
)
from ..value_objects import Identity, Money

from .keyed_lock import KeyedLock

DEFAULT_MAX_LINE_QUANTITY = 99
DEFAULT_MAX_WRITE_ATTEMPTS = 5
DEFAULT_RETRY_BASE_DELAY = 0.02


class NoIdentityError(Exception):
    """カートを持てない主体（匿名）で操作したエラー."""

    def __init__(self) -> None:
        super().__init__("A user or guest identity is required to use a cart")


class CartValidationError(Exception):
    """カート操作の入力が不正なエラー."""

    pass


class CartConflictError(Exception):
    """再試行しても書き込み競合が解消しなかったエラー."""

    def __init__(self, owner_key: OwnerKey, attempts: int) -> None:
        self.owner_key = owner_key
        self.attempts = attempts
        super().__init__(f"Cart write conflict on {owner_key} after {attempts} attempts")


@dataclass(frozen=True)
class CartSummary:
    """カートの集計値."""

    item_count: int
    total_quantity: int
    total_amount: Money


@dataclass(frozen=True)
class CartValidationIssue:
    """カート行の検証で見つかった問題."""

    product_id: ProductId
    catalog_id: CatalogId | None
    action: str  # "remove" | "update"
    reason: str
    suggested_quantity: int | None = None


@dataclass(frozen=True)
class CartValidationReport:
    """カート検証の結果."""

    cart: Cart
    issues: tuple[CartValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        """問題がないか."""
        return not self.issues


class CartStateEngine:
    """主体ごとに1つのカートを線形化して更新する.

    同一プロセス内では所有者キー単位のロックで直列化し、
    プロセス間ではリポジトリのバージョン照合で更新の消失を防ぐ。
    バージョン不一致時は読み込みからやり直す。
    """

    def __init__(
        self,
        cart_repository: CartRepository,
        product_catalog: ProductCatalog | None = None,
        *,
        max_line_quantity: int = DEFAULT_MAX_LINE_QUANTITY,
        max_attempts: int = DEFAULT_MAX_WRITE_ATTEMPTS,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        locks: KeyedLock | None = None,
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        """初期化.

        Args:
            cart_repository: カートリポジトリ
            product_catalog: 商品カタログ（Noneなら商品の存在確認をしない）
            max_line_quantity: 1行あたりの数量上限
            max_attempts: 書き込み競合時の最大試行回数
            retry_base_delay: 再試行の初回待機秒数（試行ごとに倍増）
            locks: 所有者キー単位のロック
            sleep: 待機関数
            logger: ロガー
        """
        if max_line_quantity < 1:
            raise ValueError("max_line_quantity must be at least 1")
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._repository = cart_repository
        self._catalog = product_catalog
        self._max_line_quantity = max_line_quantity
        self._max_attempts = max_attempts
        self._retry_base_delay = retry_base_delay
        self._locks = locks or KeyedLock()
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)

    @property
    def max_line_quantity(self) -> int:
        """1行あたりの数量上限."""
        return self._max_line_quantity

    # --- 主体向けの操作 ---

    def get_cart(self, identity: Identity) -> Cart:
        """カートを取得する（存在しなければ空のカートを作成する）."""
        return self.load_or_create(self.owner_key_of(identity))

    def add_item(
        self,
        identity: Identity,
        product_id: ProductId,
        quantity: int,
        catalog_id: CatalogId | None = None,
    ) -> Cart:
        """商品を追加する（同じ行があれば数量を加算する）.

        Raises:
            NoIdentityError: 匿名の場合
            CartValidationError: 数量が不正、または商品が存在しない場合
            CartConflictError: 書き込み競合が解消しなかった場合
        """
        owner_key = self.owner_key_of(identity)
        self._require_quantity(quantity, minimum=1)
        unit_price = self._check_product(product_id, catalog_id)

        def apply(cart: Cart) -> bool:
            current = cart.get_item(product_id, catalog_id)
            total = quantity + (current.quantity if current else 0)
            if total > self._max_line_quantity:
                raise CartValidationError(
                    f"Quantity for {product_id} would exceed the maximum of {self._max_line_quantity}"
                )
            cart.add_item(product_id, quantity, catalog_id, unit_price)
            return True

        return self.mutate(owner_key, apply)

    def update_item(
        self,
        identity: Identity,
        product_id: ProductId,
        quantity: int,
        catalog_id: CatalogId | None = None,
    ) -> Cart:
        """行の数量を絶対値で設定する（0以下は削除）.

        Raises:
            NoIdentityError: 匿名の場合
            CartValidationError: 数量が不正、または商品が存在しない場合
            CartConflictError: 書き込み競合が解消しなかった場合
        """
        owner_key = self.owner_key_of(identity)
        self._require_quantity(quantity, minimum=None)
        unit_price = self._check_product(product_id, catalog_id) if quantity > 0 else None

        def apply(cart: Cart) -> bool:
            return cart.set_quantity(product_id, quantity, catalog_id, unit_price)

        return self.mutate(owner_key, apply)

    def remove_item(
        self,
        identity: Identity,
        product_id: ProductId,
        catalog_id: CatalogId | None = None,
    ) -> Cart:
        """行を削除する（存在しなければ何もしない）."""
        owner_key = self.owner_key_of(identity)
        return self.mutate(owner_key, lambda cart: cart.remove_item(product_id, catalog_id))

    def clear(self, identity: Identity) -> Cart:
        """カートを空にする."""
        owner_key = self.owner_key_of(identity)
        return self.mutate(owner_key, lambda cart: cart.clear())

    def get_cart_summary(self, identity: Identity) -> CartSummary:
        """カートの集計値を取得する."""
        cart = self.get_cart(identity)
        return CartSummary(
            item_count=cart.get_item_count(),
            total_quantity=cart.get_total_quantity(),
            total_amount=cart.get_total_amount(),
        )

    def validate_cart(self, identity: Identity) -> CartValidationReport:
        """カートの各行を検証する（カートは変更しない）."""
        cart = self.get_cart(identity)
        issues: list[CartValidationIssue] = []
        for item in cart.get_items():
            if self._catalog is not None and not self._product_exists(item.product_id, item.catalog_id):
                issues.append(
                    CartValidationIssue(
                        product_id=item.product_id,
                        catalog_id=item.catalog_id,
                        action="remove",
                        reason="Product is no longer available",
                    )
                )
                continue
            if item.quantity > self._max_line_quantity:
                issues.append(
                    CartValidationIssue(
                        product_id=item.product_id,
                        catalog_id=item.catalog_id,
                        action="update",
                        reason=f"Quantity exceeds the maximum of {self._max_line_quantity}",
                        suggested_quantity=self._max_line_quantity,
                    )
                )
        return CartValidationReport(cart=cart, issues=tuple(issues))

    # --- 他コンポーネント向けの保存プリミティブ ---

    def owner_key_of(self, identity: Identity) -> OwnerKey:
        """主体のカート所有者キーを返す.

        Raises:
            NoIdentityError: 匿名の場合
        """
        owner_key = identity.owner_key()
        if owner_key is None:
            raise NoIdentityError()
        return owner_key

    @contextmanager
    def exclusive(self, *owner_keys: OwnerKey) -> Iterator[None]:
        """指定した所有者キーの排他を引数の順に獲得する."""
        with self._locks.hold(*(key.value for key in owner_keys)):
            yield

    def find(self, owner_key: OwnerKey) -> Cart | None:
        """カートを検索する（作成はしない）."""
        return self._repository.find_by_owner_key(owner_key)

    def load_or_create(self, owner_key: OwnerKey) -> Cart:
        """カートを読み込む（存在しなければ空のカートを作成する）.

        作成の競合に負けた場合は相手が作成したカートを読み直す。
        """
        cart = self._repository.find_by_owner_key(owner_key)
        if cart is not None:
            return cart

        cart = Cart.create(owner_key)
        try:
            self._repository.add(cart)
        except CartAlreadyExistsError:
            existing = self._repository.find_by_owner_key(owner_key)
            if existing is None:
                raise CartConflictError(owner_key, 1)
            return existing
        self._logger.debug("Cart created: %s", _loggable(owner_key))
        return cart

    def mutate(self, owner_key: OwnerKey, apply: Callable[[Cart], bool]) -> Cart:
        """読み込み・変更・バージョン照合付き保存を行う.

        apply がFalseを返した場合は書き込まずにそのままのカートを返す。
        バージョン不一致時は指数バックオフで読み込みからやり直す。

        Raises:
            CartConflictError: 最大試行回数まで競合した場合
        """
        delay = self._retry_base_delay
        for attempt in range(1, self._max_attempts + 1):
            with self.exclusive(owner_key):
                cart = self.load_or_create(owner_key)
                if not apply(cart):
                    return cart
                try:
                    return self._repository.save(cart)
                except VersionConflictError:
                    self._logger.warning(
                        "Cart version conflict on %s (attempt %d/%d)",
                        _loggable(owner_key),
                        attempt,
                        self._max_attempts,
                    )
            if attempt < self._max_attempts:
                self._sleep(delay)
                delay *= 2

        self._logger.error("Cart write gave up after %d attempts: %s", self._max_attempts, _loggable(owner_key))
        raise CartConflictError(owner_key, self._max_attempts)

    def delete_cart(self, owner_key: OwnerKey) -> None:
        """カートを削除する（存在しなければ何もしない）."""
        self._repository.delete(owner_key)

    # --- 内部処理 ---

    def _require_quantity(self, quantity: int, minimum: int | None) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise CartValidationError("Quantity must be an integer")
        if minimum is not None and quantity < minimum:
            raise CartValidationError(f"Quantity must be at least {minimum}")
        if quantity > self._max_line_quantity:
            raise CartValidationError(f"Quantity cannot exceed {self._max_line_quantity}")

    def _check_product(self, product_id: ProductId, catalog_id: CatalogId | None) -> Money | None:
        if self._catalog is None:
            return None
        if not self._product_exists(product_id, catalog_id):
            raise CartValidationError(f"Product not found: {product_id}")
        try:
            return self._catalog.price_of(product_id, catalog_id)
        except ProductCatalogError as e:
            raise CartValidationError(f"Failed to look up price for {product_id}") from e

    def _product_exists(self, product_id: ProductId, catalog_id: CatalogId | None) -> bool:
        try:
            return self._catalog.exists(product_id, catalog_id)
        except ProductCatalogError as e:
            raise CartValidationError(f"Failed to look up product {product_id}") from e


def _loggable(owner_key: OwnerKey) -> str:
    if owner_key.is_guest():
        return f"guest:{owner_key.guest_token().masked()}"
    return owner_key.value
