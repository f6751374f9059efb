"""InMemoryCartRepositoryのテスト."""
from datetime import datetime, timedelta, timezone

import pytest

from storefront.domain.entities import Cart
from storefront.domain.identifiers import OwnerKey, ProductId
from storefront.domain.ports import CartAlreadyExistsError, VersionConflictError
from storefront.infrastructure.repositories import InMemoryCartRepository

OWNER = OwnerKey("guest:tok-1")


class TestInMemoryCartRepository:
    """InMemoryCartRepositoryの単体テスト."""

    def test_addとfind(self) -> None:
        repository = InMemoryCartRepository()
        repository.add(Cart.create(OWNER))
        found = repository.find_by_owner_key(OWNER)
        assert found is not None
        assert found.version == 0

    def test_同じキーの二重登録はエラー(self) -> None:
        repository = InMemoryCartRepository()
        repository.add(Cart.create(OWNER))
        with pytest.raises(CartAlreadyExistsError):
            repository.add(Cart.create(OWNER))

    def test_saveはバージョンを進めたコピーを返す(self) -> None:
        repository = InMemoryCartRepository()
        repository.add(Cart.create(OWNER))
        cart = repository.find_by_owner_key(OWNER)
        cart.add_item(ProductId("p-1"), 1)
        saved = repository.save(cart)
        assert saved.version == 1
        assert cart.version == 0
        assert repository.find_by_owner_key(OWNER).version == 1

    def test_古いバージョンでの保存は競合(self) -> None:
        repository = InMemoryCartRepository()
        repository.add(Cart.create(OWNER))
        first = repository.find_by_owner_key(OWNER)
        second = repository.find_by_owner_key(OWNER)
        first.add_item(ProductId("p-1"), 1)
        repository.save(first)
        second.add_item(ProductId("p-2"), 1)
        with pytest.raises(VersionConflictError):
            repository.save(second)

    def test_存在しないカートの保存は競合(self) -> None:
        repository = InMemoryCartRepository()
        with pytest.raises(VersionConflictError):
            repository.save(Cart.create(OWNER))

    def test_取得したカートの変更は保存内容に影響しない(self) -> None:
        repository = InMemoryCartRepository()
        repository.add(Cart.create(OWNER))
        repository.find_by_owner_key(OWNER).add_item(ProductId("p-1"), 1)
        assert repository.find_by_owner_key(OWNER).is_empty() is True

    def test_古いゲストカートの検索(self) -> None:
        repository = InMemoryCartRepository()
        old = Cart.create(OWNER)
        old.updated_at = datetime.now(timezone.utc) - timedelta(days=2)
        repository.add(old)
        repository.add(Cart.create(OwnerKey("guest:tok-2")))
        user_cart = Cart.create(OwnerKey("user:u-1"))
        user_cart.updated_at = old.updated_at
        repository.add(user_cart)

        found = repository.find_guest_carts_updated_before(datetime.now(timezone.utc) - timedelta(days=1), 10)

        assert [c.owner_key for c in found] == [OWNER]

    def test_deleteは存在しなくてもエラーにならない(self) -> None:
        repository = InMemoryCartRepository()
        repository.delete(OWNER)
        assert repository.find_by_owner_key(OWNER) is None
