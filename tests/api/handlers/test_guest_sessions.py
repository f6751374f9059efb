"""ゲストセッションAPIハンドラーのテスト."""
import json
from datetime import datetime
from unittest.mock import patch

from storefront.api.dependencies import Dependencies
from storefront.api.handlers.cart import get_cart
from storefront.api.handlers.guest_sessions import create_guest_session
from storefront.domain.identifiers import GuestToken
from storefront.domain.services import GuestSessionStore


class TestCreateGuestSession:
    """create_guest_sessionのテスト."""

    def test_セッションを発行してトークンを返す(self) -> None:
        event = {
            "headers": {"User-Agent": "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0)"},
            "requestContext": {"identity": {"sourceIp": "203.0.113.5"}},
        }

        response = create_guest_session(event, None)

        assert response["statusCode"] == 201
        body = json.loads(response["body"])
        assert body["session_type"] == "guest"
        assert body["device_type"] == "mobile"
        assert response["headers"]["X-Session-Id"] == body["session_id"]
        stored = Dependencies.get_guest_session_store().find_by_token(GuestToken(body["session_id"]))
        assert stored.metadata.ip_address == "203.0.113.5"
        assert stored.expires_at == datetime.fromisoformat(body["expires_at"])

    def test_発行したセッションでカートを使える(self) -> None:
        created = create_guest_session({"headers": {}}, None)
        token = created["headers"]["X-Session-Id"]

        response = get_cart({"headers": {"x-session-id": token}}, None)

        assert response["headers"]["X-Session-Id"] == token
        assert json.loads(response["body"])["owner_key"] == f"guest:{token}"

    def test_保存に失敗したら500(self) -> None:
        with patch.object(GuestSessionStore, "create", side_effect=RuntimeError("boom")):
            response = create_guest_session({"headers": {}}, None)

        assert response["statusCode"] == 500
        assert json.loads(response["body"])["error"]["code"] == "INTERNAL_ERROR"
