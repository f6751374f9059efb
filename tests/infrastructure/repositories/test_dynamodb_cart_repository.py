"""DynamoDBCartRepositoryのテスト."""
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from storefront.domain.entities import Cart
from storefront.domain.identifiers import CatalogId, OwnerKey, ProductId
from storefront.domain.ports import CartAlreadyExistsError, VersionConflictError
from storefront.domain.value_objects import Money
from storefront.infrastructure.repositories import DynamoDBCartRepository

GUEST_KEY = OwnerKey("guest:tok-1")
USER_KEY = OwnerKey("user:u-1")


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "test"}}, "PutItem")


@pytest.fixture
def repository() -> DynamoDBCartRepository:
    with patch.object(DynamoDBCartRepository, "__init__", lambda self: None):
        repository = DynamoDBCartRepository()
    repository._table = MagicMock()
    return repository


def _stored_item(**overrides):
    item = {
        "owner_key": "user:u-1",
        "owner_type": "user",
        "items": [
            {
                "product_id": "p-1",
                "catalog_id": "c-1",
                "quantity": Decimal("3"),
                "unit_price": Decimal("500"),
                "added_at": "2026-01-01T12:00:00+00:00",
            },
            {"product_id": "p-2", "quantity": Decimal("1"), "added_at": "2026-01-01T12:00:00+00:00"},
        ],
        "version": Decimal("4"),
        "created_at": "2026-01-01T12:00:00+00:00",
        "updated_at": "2026-01-01T13:00:00+00:00",
    }
    item.update(overrides)
    return item


class TestDynamoDBCartRepository:
    """DynamoDBCartRepositoryの単体テスト."""

    def test_addは存在しない場合のみ書き込む(self, repository) -> None:
        repository.add(Cart.create(USER_KEY))

        kwargs = repository._table.put_item.call_args.kwargs
        assert kwargs["ConditionExpression"] == Attr("owner_key").not_exists()
        assert kwargs["Item"]["owner_key"] == "user:u-1"
        assert kwargs["Item"]["version"] == 0
        assert "ttl" not in kwargs["Item"]

    def test_ゲストカートにはTTLを付ける(self, repository) -> None:
        repository.add(Cart.create(GUEST_KEY))

        item = repository._table.put_item.call_args.kwargs["Item"]
        assert item["owner_type"] == "guest"
        assert isinstance(item["ttl"], int)

    def test_add条件不成立はCartAlreadyExists(self, repository) -> None:
        repository._table.put_item.side_effect = _client_error("ConditionalCheckFailedException")
        with pytest.raises(CartAlreadyExistsError):
            repository.add(Cart.create(USER_KEY))

    def test_その他のClientErrorは再送出(self, repository) -> None:
        repository._table.put_item.side_effect = _client_error("ProvisionedThroughputExceededException")
        with pytest.raises(ClientError):
            repository.add(Cart.create(USER_KEY))

    def test_saveはバージョン一致を条件に書き込む(self, repository) -> None:
        cart = Cart.create(USER_KEY)
        cart.version = 4
        cart.add_item(ProductId("p-1"), 2, unit_price=Money(100))

        saved = repository.save(cart)

        kwargs = repository._table.put_item.call_args.kwargs
        assert kwargs["ConditionExpression"] == Attr("version").eq(4)
        assert kwargs["Item"]["version"] == 5
        assert saved.version == 5
        assert saved.get_item(ProductId("p-1")).unit_price == Money(100)
        assert cart.version == 4

    def test_save条件不成立はVersionConflict(self, repository) -> None:
        repository._table.put_item.side_effect = _client_error("ConditionalCheckFailedException")
        with pytest.raises(VersionConflictError):
            repository.save(Cart.create(USER_KEY))

    def test_find_by_owner_keyでDecimalを変換(self, repository) -> None:
        repository._table.get_item.return_value = {"Item": _stored_item()}

        cart = repository.find_by_owner_key(USER_KEY)

        assert cart.version == 4
        first = cart.get_item(ProductId("p-1"), CatalogId("c-1"))
        assert first.quantity == 3
        assert first.unit_price == Money(500)
        assert cart.get_item(ProductId("p-2")).unit_price is None
        assert cart.updated_at == datetime(2026, 1, 1, 13, 0, tzinfo=timezone.utc)
        repository._table.get_item.assert_called_once_with(Key={"owner_key": "user:u-1"}, ConsistentRead=True)

    def test_存在しなければNone(self, repository) -> None:
        repository._table.get_item.return_value = {}
        assert repository.find_by_owner_key(USER_KEY) is None

    def test_deleteはキーを指定(self, repository) -> None:
        repository.delete(GUEST_KEY)
        repository._table.delete_item.assert_called_once_with(Key={"owner_key": "guest:tok-1"})

    def test_古いゲストカートの検索はページングする(self, repository) -> None:
        guest = _stored_item(owner_key="guest:tok-1", owner_type="guest")
        repository._table.scan.side_effect = [
            {"Items": [guest], "LastEvaluatedKey": {"owner_key": "guest:tok-1"}},
            {"Items": [_stored_item(owner_key="guest:tok-2", owner_type="guest")]},
        ]

        carts = repository.find_guest_carts_updated_before(datetime(2026, 1, 2, tzinfo=timezone.utc), 10)

        assert [c.owner_key.value for c in carts] == ["guest:tok-1", "guest:tok-2"]
        second_call = repository._table.scan.call_args_list[1].kwargs
        assert second_call["ExclusiveStartKey"] == {"owner_key": "guest:tok-1"}

    def test_検索は件数上限で打ち切る(self, repository) -> None:
        repository._table.scan.return_value = {
            "Items": [_stored_item(owner_key=f"guest:t{i}", owner_type="guest") for i in range(5)],
            "LastEvaluatedKey": {"owner_key": "guest:t4"},
        }

        carts = repository.find_guest_carts_updated_before(datetime(2026, 1, 2, tzinfo=timezone.utc), 3)

        assert len(carts) == 3
        assert repository._table.scan.call_count == 1
