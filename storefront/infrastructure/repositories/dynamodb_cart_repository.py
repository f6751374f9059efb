"""カートリポジトリのDynamoDB実装."""
import logging
import os
from datetime import datetime, timedelta
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from storefront.domain.entities import Cart, CartItem
from storefront.domain.identifiers import CatalogId, OwnerKey, ProductId
from storefront.domain.ports import CartAlreadyExistsError, CartRepository, VersionConflictError
from storefront.domain.value_objects import Money

from .dynamodb_errors import is_conditional_check_failed

logger = logging.getLogger(__name__)

# ゲストカートのTTL: 最終更新から24時間（清掃ジョブの取りこぼし対策）
GUEST_CART_TTL_HOURS = 24


class DynamoDBCartRepository(CartRepository):
    """カートリポジトリのDynamoDB実装.

    パーティションキーは owner_key。書き込みはすべて条件付きで行う。
    """

    def __init__(self, table_name: str | None = None) -> None:
        """初期化."""
        self._table_name = table_name or os.environ.get("CART_TABLE_NAME", "storefront-cart")
        self._dynamodb = boto3.resource("dynamodb")
        self._table = self._dynamodb.Table(self._table_name)

    def find_by_owner_key(self, owner_key: OwnerKey) -> Cart | None:
        """所有者キーで検索する."""
        response = self._table.get_item(Key={"owner_key": owner_key.value}, ConsistentRead=True)
        item = response.get("Item")
        if item is None:
            return None
        return self._from_dynamodb_item(item)

    def add(self, cart: Cart) -> None:
        """新しいカートを登録する."""
        try:
            self._table.put_item(
                Item=self._to_dynamodb_item(cart),
                ConditionExpression=Attr("owner_key").not_exists(),
            )
        except ClientError as e:
            if is_conditional_check_failed(e):
                raise CartAlreadyExistsError(cart.owner_key) from e
            logger.error("Failed to add cart %s: %s", cart.owner_key, e)
            raise

    def save(self, cart: Cart) -> Cart:
        """バージョンが一致する場合のみ保存する."""
        item = self._to_dynamodb_item(cart)
        item["version"] = cart.version + 1
        try:
            self._table.put_item(
                Item=item,
                ConditionExpression=Attr("version").eq(cart.version),
            )
        except ClientError as e:
            if is_conditional_check_failed(e):
                raise VersionConflictError(cart.owner_key, cart.version) from e
            logger.error("Failed to save cart %s: %s", cart.owner_key, e)
            raise
        return self._from_dynamodb_item(item)

    def delete(self, owner_key: OwnerKey) -> None:
        """カートを削除する."""
        self._table.delete_item(Key={"owner_key": owner_key.value})

    def find_guest_carts_updated_before(self, threshold: datetime, limit: int) -> list[Cart]:
        """指定時刻より前に更新されたゲストカートを検索する."""
        scan_kwargs: dict[str, Any] = {
            "FilterExpression": Attr("owner_type").eq("guest") & Attr("updated_at").lt(threshold.isoformat()),
        }
        carts: list[Cart] = []
        while True:
            response = self._table.scan(**scan_kwargs)
            for item in response.get("Items", []):
                carts.append(self._from_dynamodb_item(item))
                if len(carts) >= limit:
                    return carts
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return carts
            scan_kwargs["ExclusiveStartKey"] = last_key

    def _to_dynamodb_item(self, cart: Cart) -> dict[str, Any]:
        """CartエンティティをDynamoDBアイテムに変換."""
        items = []
        for item in cart.get_items():
            data: dict[str, Any] = {
                "product_id": item.product_id.value,
                "quantity": item.quantity,
                "added_at": item.added_at.isoformat(),
            }
            if item.catalog_id is not None:
                data["catalog_id"] = item.catalog_id.value
            if item.unit_price is not None:
                data["unit_price"] = item.unit_price.value
            items.append(data)

        result: dict[str, Any] = {
            "owner_key": cart.owner_key.value,
            "owner_type": cart.owner_key.prefix,
            "items": items,
            "version": cart.version,
            "created_at": cart.created_at.isoformat(),
            "updated_at": cart.updated_at.isoformat(),
        }
        if cart.owner_key.is_guest():
            result["ttl"] = int((cart.updated_at + timedelta(hours=GUEST_CART_TTL_HOURS)).timestamp())
        return result

    def _from_dynamodb_item(self, item: dict[str, Any]) -> Cart:
        """DynamoDBアイテムをCartエンティティに変換."""
        cart_items = []
        for data in item.get("items", []):
            catalog_id = data.get("catalog_id")
            unit_price = data.get("unit_price")
            cart_items.append(
                CartItem(
                    product_id=ProductId(data["product_id"]),
                    quantity=self._to_int(data["quantity"]),
                    catalog_id=CatalogId(catalog_id) if catalog_id else None,
                    unit_price=Money(self._to_int(unit_price)) if unit_price is not None else None,
                    added_at=datetime.fromisoformat(data["added_at"]),
                )
            )

        return Cart(
            owner_key=OwnerKey(item["owner_key"]),
            _items=cart_items,
            version=self._to_int(item.get("version", 0)),
            created_at=datetime.fromisoformat(item["created_at"]),
            updated_at=datetime.fromisoformat(item["updated_at"]),
        )

    @staticmethod
    def _to_int(value: Any) -> int:
        """DynamoDBのDecimalをintに変換."""
        return int(value)
