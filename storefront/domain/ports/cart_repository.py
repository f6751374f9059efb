"""カートリポジトリインターフェース."""
from abc import ABC, abstractmethod
from datetime import datetime

from ..entities import Cart
from ..identifiers import OwnerKey


class CartAlreadyExistsError(Exception):
    """同じ所有者キーのカートが既に存在するエラー."""

    def __init__(self, owner_key: OwnerKey) -> None:
        self.owner_key = owner_key
        super().__init__(f"Cart already exists: {owner_key}")


class VersionConflictError(Exception):
    """保存時にバージョンが一致しなかったエラー."""

    def __init__(self, owner_key: OwnerKey, expected_version: int) -> None:
        self.owner_key = owner_key
        self.expected_version = expected_version
        super().__init__(f"Version conflict on {owner_key} (expected {expected_version})")


class CartRepository(ABC):
    """カートリポジトリのインターフェース.

    すべての書き込みは単一ドキュメント単位でアトミックに行われる。
    """

    @abstractmethod
    def find_by_owner_key(self, owner_key: OwnerKey) -> Cart | None:
        """所有者キーで検索する."""
        pass

    @abstractmethod
    def add(self, cart: Cart) -> None:
        """新しいカートを登録する.

        Raises:
            CartAlreadyExistsError: 同じ所有者キーのカートが既に存在する場合
        """
        pass

    @abstractmethod
    def save(self, cart: Cart) -> Cart:
        """カートを保存する.

        保存済みのバージョンが cart.version と一致する場合のみ書き込み、
        バージョンを1つ進めたカートを返す。

        Raises:
            VersionConflictError: バージョンが一致しない、またはカートが存在しない場合
        """
        pass

    @abstractmethod
    def delete(self, owner_key: OwnerKey) -> None:
        """カートを削除する（存在しない場合は何もしない）."""
        pass

    @abstractmethod
    def find_guest_carts_updated_before(self, threshold: datetime, limit: int) -> list[Cart]:
        """指定時刻より前に更新されたゲストカートを検索する."""
        pass
