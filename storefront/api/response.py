"""API レスポンスユーティリティ."""
import json
import os
from dataclasses import asdict, is_dataclass
from typing import Any

from storefront.domain.entities import GuestSession
from storefront.domain.value_objects import Money

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]

SESSION_ID_HEADER = "X-Session-Id"
SESSION_TYPE_HEADER = "X-Session-Type"


def get_cors_origin(event: dict | None = None) -> str:
    """リクエストの Origin ヘッダーから許可するオリジンを返す."""
    if event:
        headers = event.get("headers") or {}
        origin = headers.get("origin") or headers.get("Origin") or ""
        if origin in ALLOWED_ORIGINS:
            return origin
    return ALLOWED_ORIGINS[0] if ALLOWED_ORIGINS else "*"


def _base_headers(event: dict | None) -> dict[str, str]:
    return {
        "Content-Type": "application/json",
        "Access-Control-Allow-Origin": get_cors_origin(event),
        "Access-Control-Allow-Headers": "Content-Type,Authorization,token,x-access-token,x-session-id,x-guest-session",
        "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
        "Access-Control-Expose-Headers": f"{SESSION_ID_HEADER},{SESSION_TYPE_HEADER}",
    }


def _json_default(value: Any) -> Any:
    if isinstance(value, Money):
        return value.value
    if is_dataclass(value):
        return asdict(value)
    return str(value)


def guest_session_headers(session: GuestSession | None) -> dict[str, str]:
    """ゲストセッションのトークンを返すレスポンスヘッダー."""
    if session is None:
        return {}
    return {SESSION_ID_HEADER: session.token.value, SESSION_TYPE_HEADER: "guest"}


def success_response(
    body: Any,
    status_code: int = 200,
    event: dict | None = None,
    headers: dict[str, str] | None = None,
) -> dict:
    """成功レスポンスを生成する.

    Args:
        body: レスポンスボディ
        status_code: HTTPステータスコード
        event: API Gatewayイベント（CORS Origin判定用）
        headers: 追加のレスポンスヘッダー

    Returns:
        API Gatewayレスポンス形式の辞書
    """
    return {
        "statusCode": status_code,
        "headers": {**_base_headers(event), **(headers or {})},
        "body": json.dumps(body, ensure_ascii=False, default=_json_default),
    }


def error_response(
    message: str, status_code: int = 400, error_code: str | None = None, event: dict | None = None,
) -> dict:
    """エラーレスポンスを生成する.

    Args:
        message: エラーメッセージ
        status_code: HTTPステータスコード
        error_code: エラーコード
        event: API Gatewayイベント（CORS Origin判定用）

    Returns:
        API Gatewayレスポンス形式の辞書
    """
    body = {"error": {"message": message}}
    if error_code:
        body["error"]["code"] = error_code

    return {
        "statusCode": status_code,
        "headers": _base_headers(event),
        "body": json.dumps(body, ensure_ascii=False),
    }


def bad_request_response(message: str, event: dict | None = None) -> dict:
    """400 Bad Requestレスポンスを生成する."""
    return error_response(message, status_code=400, error_code="BAD_REQUEST", event=event)


def unauthorized_response(
    message: str = "Authentication required", error_code: str = "UNAUTHORIZED", event: dict | None = None,
) -> dict:
    """401 Unauthorizedレスポンスを生成する."""
    return error_response(message, status_code=401, error_code=error_code, event=event)


def forbidden_response(message: str = "Access denied", event: dict | None = None) -> dict:
    """403 Forbiddenレスポンスを生成する."""
    return error_response(message, status_code=403, error_code="FORBIDDEN", event=event)


def conflict_response(message: str, error_code: str = "CONFLICT", event: dict | None = None) -> dict:
    """409 Conflictレスポンスを生成する."""
    return error_response(message, status_code=409, error_code=error_code, event=event)


def internal_error_response(message: str = "Internal server error", event: dict | None = None) -> dict:
    """500 Internal Server Errorレスポンスを生成する."""
    return error_response(message, status_code=500, error_code="INTERNAL_ERROR", event=event)
