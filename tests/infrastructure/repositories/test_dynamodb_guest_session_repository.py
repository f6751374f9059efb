"""DynamoDBGuestSessionRepositoryのテスト."""
from datetime import timedelta
from unittest.mock import MagicMock, patch

import pytest
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from storefront.domain.entities import GuestSession
from storefront.domain.enums import DeviceType
from storefront.domain.identifiers import GuestToken
from storefront.domain.ports import GuestSessionAlreadyExistsError
from storefront.domain.value_objects import SessionMetadata
from storefront.infrastructure.repositories import DynamoDBGuestSessionRepository

TOKEN = GuestToken("tok-1")


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "test"}}, "UpdateItem")


@pytest.fixture
def repository() -> DynamoDBGuestSessionRepository:
    with patch.object(DynamoDBGuestSessionRepository, "__init__", lambda self: None):
        repository = DynamoDBGuestSessionRepository()
    repository._table = MagicMock()
    return repository


class TestDynamoDBGuestSessionRepository:
    """DynamoDBGuestSessionRepositoryの単体テスト."""

    def test_addは存在しない場合のみ書き込む(self, repository, clock) -> None:
        metadata = SessionMetadata.from_request("1.1.1.1", "iPhone")
        session = GuestSession.issue(now=clock(), ttl=timedelta(hours=24), metadata=metadata)

        repository.add(session)

        kwargs = repository._table.put_item.call_args.kwargs
        assert kwargs["ConditionExpression"] == Attr("token").not_exists()
        item = kwargs["Item"]
        assert item["expires_at"] == (clock() + timedelta(hours=24)).isoformat()
        assert item["ttl"] == int((clock() + timedelta(hours=24)).timestamp())
        assert item["expires_epoch"] == item["ttl"]
        assert item["metadata"]["device_type"] == "mobile"
        assert "referrer" not in item["metadata"]
        assert "migrating_since" not in item

    def test_トークン衝突はAlreadyExists(self, repository, clock) -> None:
        repository._table.put_item.side_effect = _client_error("ConditionalCheckFailedException")
        with pytest.raises(GuestSessionAlreadyExistsError):
            repository.add(GuestSession.issue(now=clock()))

    def test_find_by_tokenで復元(self, repository) -> None:
        repository._table.get_item.return_value = {
            "Item": {
                "token": "tok-1",
                "created_at": "2026-01-01T12:00:00+00:00",
                "expires_at": "2026-01-02T12:00:00+00:00",
                "last_seen_at": "2026-01-01T13:00:00+00:00",
                "migrating_since": "2026-01-01T13:30:00+00:00",
                "metadata": {"ip_address": "1.1.1.1", "device_type": "desktop"},
            }
        }

        session = repository.find_by_token(TOKEN)

        assert session.token == TOKEN
        assert session.is_migrating() is True
        assert session.metadata.device_type == DeviceType.DESKTOP
        assert session.metadata.user_agent is None

    def test_last_seenの更新は存在を条件にする(self, repository, clock) -> None:
        assert repository.update_last_seen(TOKEN, clock()) is True

        kwargs = repository._table.update_item.call_args.kwargs
        assert kwargs["Key"] == {"token": "tok-1"}
        assert kwargs["ConditionExpression"] == Attr("token").exists()
        assert kwargs["UpdateExpression"] == "SET last_seen_at = :seen_at"

    def test_存在しないセッションの更新はFalse(self, repository, clock) -> None:
        repository._table.update_item.side_effect = _client_error("ConditionalCheckFailedException")
        assert repository.set_migrating(TOKEN, clock()) is False
        assert repository.clear_migrating(TOKEN) is False

    def test_移行中はTTLを外してTTLによる削除を止める(self, repository, clock) -> None:
        repository.set_migrating(TOKEN, clock())

        kwargs = repository._table.update_item.call_args.kwargs
        assert kwargs["UpdateExpression"] == "SET migrating_since = :since REMOVE #ttl"
        assert kwargs["ExpressionAttributeNames"] == {"#ttl": "ttl"}
        assert kwargs["ExpressionAttributeValues"] == {":since": clock().isoformat()}
        assert kwargs["ConditionExpression"] == Attr("token").exists()

    def test_移行中マークを外すとTTLを有効期限に戻す(self, repository) -> None:
        repository.clear_migrating(TOKEN)

        kwargs = repository._table.update_item.call_args.kwargs
        assert kwargs["UpdateExpression"] == "SET #ttl = expires_epoch REMOVE migrating_since"
        assert kwargs["ExpressionAttributeNames"] == {"#ttl": "ttl"}

    def test_移行中のセッションはTTLなしで書き込む(self, repository, clock) -> None:
        session = GuestSession.issue(now=clock(), ttl=timedelta(hours=24))
        session.mark_migrating(clock())

        repository.add(session)

        item = repository._table.put_item.call_args.kwargs["Item"]
        assert "ttl" not in item
        assert item["expires_epoch"] == int((clock() + timedelta(hours=24)).timestamp())
        assert item["migrating_since"] == clock().isoformat()

    def test_清掃の削除は期限切れかつ移行中でないことを条件にする(self, repository, clock) -> None:
        assert repository.delete_if_sweepable(TOKEN, clock()) is True

        kwargs = repository._table.delete_item.call_args.kwargs
        assert kwargs["ConditionExpression"] == (
            Attr("expires_at").lt(clock().isoformat()) & Attr("migrating_since").not_exists()
        )

    def test_清掃の削除条件不成立はFalse(self, repository, clock) -> None:
        repository._table.delete_item.side_effect = _client_error("ConditionalCheckFailedException")
        assert repository.delete_if_sweepable(TOKEN, clock()) is False

    def test_清掃の削除でその他のエラーは再送出(self, repository, clock) -> None:
        repository._table.delete_item.side_effect = _client_error("InternalServerError")
        with pytest.raises(ClientError):
            repository.delete_if_sweepable(TOKEN, clock())

    def test_find_allはページングする(self, repository) -> None:
        def item(token: str) -> dict:
            return {
                "token": token,
                "created_at": "2026-01-01T12:00:00+00:00",
                "expires_at": "2026-01-02T12:00:00+00:00",
                "last_seen_at": "2026-01-01T12:00:00+00:00",
            }

        repository._table.scan.side_effect = [
            {"Items": [item("a")], "LastEvaluatedKey": {"token": "a"}},
            {"Items": [item("b")]},
        ]

        sessions = repository.find_all()

        assert [s.token.value for s in sessions] == ["a", "b"]
