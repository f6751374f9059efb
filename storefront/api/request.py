"""API リクエストユーティリティ."""
import json
from typing import Any
from urllib.parse import unquote


def get_path_parameter(event: dict, name: str) -> str | None:
    """パスパラメータを取得する.

    Args:
        event: Lambda イベント
        name: パラメータ名

    Returns:
        パラメータ値（存在しない場合はNone、URLデコード済み）
    """
    path_params = event.get("pathParameters") or {}
    value = path_params.get(name)
    if value is not None:
        # URLエンコードされている可能性があるのでデコード
        return unquote(value)
    return None


def get_query_parameters(event: dict) -> dict[str, Any]:
    """クエリパラメータ全体を取得する."""
    return dict(event.get("queryStringParameters") or {})


def get_query_parameter(event: dict, name: str, default: str | None = None) -> str | None:
    """クエリパラメータを取得する."""
    return get_query_parameters(event).get(name, default)


def get_body(event: dict) -> dict[str, Any]:
    """リクエストボディを取得する.

    Args:
        event: Lambda イベント

    Returns:
        パースされたボディ（空の場合は空辞書）

    Raises:
        ValueError: JSONパースに失敗した場合、またはオブジェクトでない場合
    """
    body = event.get("body")
    if not body:
        return {}
    if isinstance(body, dict):
        return body

    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON body: {e}")
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object")
    return parsed


def get_headers(event: dict) -> dict[str, Any]:
    """ヘッダー全体を取得する."""
    return dict(event.get("headers") or {})


def get_header(event: dict, name: str) -> str | None:
    """ヘッダーを取得する（大文字小文字を区別しない）.

    Args:
        event: Lambda イベント
        name: ヘッダー名

    Returns:
        ヘッダー値
    """
    name_lower = name.lower()
    for key, value in get_headers(event).items():
        if key.lower() == name_lower:
            return value
    return None


def get_source_ip(event: dict) -> str | None:
    """接続元IPアドレスを取得する（プロキシ経由なら X-Forwarded-For の先頭）."""
    forwarded = get_header(event, "x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    identity = (event.get("requestContext") or {}).get("identity") or {}
    return identity.get("sourceIp")
