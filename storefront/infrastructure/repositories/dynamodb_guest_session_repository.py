"""ゲストセッションリポジトリのDynamoDB実装."""
import logging
import os
from datetime import datetime
from typing import Any

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from storefront.domain.entities import GuestSession
from storefront.domain.identifiers import GuestToken
from storefront.domain.ports import GuestSessionAlreadyExistsError, GuestSessionRepository
from storefront.domain.value_objects import SessionMetadata

from .dynamodb_errors import is_conditional_check_failed

logger = logging.getLogger(__name__)


class DynamoDBGuestSessionRepository(GuestSessionRepository):
    """ゲストセッションリポジトリのDynamoDB実装.

    パーティションキーは token。ttl 属性に有効期限を入れ、DynamoDB の TTL でも失効させる。
    移行中は ttl を外して TTL による削除の対象から除き、移行が終わったら expires_epoch から戻す。
    日時はすべてUTCのISO 8601文字列で保存し、文字列比較で大小判定する。
    """

    def __init__(self, table_name: str | None = None) -> None:
        """初期化."""
        self._table_name = table_name or os.environ.get(
            "GUEST_SESSION_TABLE_NAME", "storefront-guest-session"
        )
        self._dynamodb = boto3.resource("dynamodb")
        self._table = self._dynamodb.Table(self._table_name)

    def add(self, session: GuestSession) -> None:
        """新しいセッションを登録する."""
        try:
            self._table.put_item(
                Item=self._to_dynamodb_item(session),
                ConditionExpression=Attr("token").not_exists(),
            )
        except ClientError as e:
            if is_conditional_check_failed(e):
                raise GuestSessionAlreadyExistsError(session.token) from e
            logger.error("Failed to add guest session %s: %s", session.token.masked(), e)
            raise

    def find_by_token(self, token: GuestToken) -> GuestSession | None:
        """トークンで検索する."""
        response = self._table.get_item(Key={"token": token.value}, ConsistentRead=True)
        item = response.get("Item")
        if item is None:
            return None
        return self._from_dynamodb_item(item)

    def update_last_seen(self, token: GuestToken, seen_at: datetime) -> bool:
        """最終アクセス時刻を更新する."""
        return self._update_existing(
            token,
            UpdateExpression="SET last_seen_at = :seen_at",
            ExpressionAttributeValues={":seen_at": seen_at.isoformat()},
        )

    def set_migrating(self, token: GuestToken, since: datetime) -> bool:
        """移行中マークを設定し、TTLによる削除を止める."""
        return self._update_existing(
            token,
            UpdateExpression="SET migrating_since = :since REMOVE #ttl",
            ExpressionAttributeNames={"#ttl": "ttl"},
            ExpressionAttributeValues={":since": since.isoformat()},
        )

    def clear_migrating(self, token: GuestToken) -> bool:
        """移行中マークを外し、TTLを有効期限に戻す."""
        return self._update_existing(
            token,
            UpdateExpression="SET #ttl = expires_epoch REMOVE migrating_since",
            ExpressionAttributeNames={"#ttl": "ttl"},
        )

    def delete(self, token: GuestToken) -> None:
        """セッションを削除する."""
        self._table.delete_item(Key={"token": token.value})

    def delete_if_sweepable(self, token: GuestToken, now: datetime) -> bool:
        """期限切れかつ移行中でない場合に限り削除する."""
        try:
            self._table.delete_item(
                Key={"token": token.value},
                ConditionExpression=(
                    Attr("expires_at").lt(now.isoformat()) & Attr("migrating_since").not_exists()
                ),
            )
        except ClientError as e:
            if is_conditional_check_failed(e):
                return False
            logger.error("Failed to sweep guest session %s: %s", token.masked(), e)
            raise
        return True

    def find_expired(self, now: datetime, limit: int) -> list[GuestSession]:
        """期限切れのセッションを検索する."""
        return self._scan(limit, FilterExpression=Attr("expires_at").lt(now.isoformat()))

    def find_all(self) -> list[GuestSession]:
        """全セッションを取得する."""
        return self._scan(None)

    def _update_existing(self, token: GuestToken, **update_kwargs: Any) -> bool:
        try:
            self._table.update_item(
                Key={"token": token.value},
                ConditionExpression=Attr("token").exists(),
                **update_kwargs,
            )
        except ClientError as e:
            if is_conditional_check_failed(e):
                return False
            logger.error("Failed to update guest session %s: %s", token.masked(), e)
            raise
        return True

    def _scan(self, limit: int | None, **scan_kwargs: Any) -> list[GuestSession]:
        sessions: list[GuestSession] = []
        while True:
            response = self._table.scan(**scan_kwargs)
            for item in response.get("Items", []):
                sessions.append(self._from_dynamodb_item(item))
                if limit is not None and len(sessions) >= limit:
                    return sessions
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                return sessions
            scan_kwargs["ExclusiveStartKey"] = last_key

    def _to_dynamodb_item(self, session: GuestSession) -> dict[str, Any]:
        """GuestSessionエンティティをDynamoDBアイテムに変換."""
        item: dict[str, Any] = {
            "token": session.token.value,
            "created_at": session.created_at.isoformat(),
            "expires_at": session.expires_at.isoformat(),
            "last_seen_at": session.last_seen_at.isoformat(),
            "metadata": {k: v for k, v in session.metadata.to_dict().items() if v is not None},
            "expires_epoch": int(session.expires_at.timestamp()),
        }
        if session.migrating_since is not None:
            item["migrating_since"] = session.migrating_since.isoformat()
        else:
            item["ttl"] = item["expires_epoch"]
        return item

    def _from_dynamodb_item(self, item: dict[str, Any]) -> GuestSession:
        """DynamoDBアイテムをGuestSessionエンティティに変換."""
        migrating_since = item.get("migrating_since")
        return GuestSession(
            token=GuestToken(item["token"]),
            created_at=datetime.fromisoformat(item["created_at"]),
            expires_at=datetime.fromisoformat(item["expires_at"]),
            last_seen_at=datetime.fromisoformat(item["last_seen_at"]),
            migrating_since=datetime.fromisoformat(migrating_since) if migrating_since else None,
            metadata=SessionMetadata.from_dict(item.get("metadata")),
        )
