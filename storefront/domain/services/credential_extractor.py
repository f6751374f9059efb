"""リクエストからの資格情報抽出."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# 先に一致した場所を採用し、複数箇所の値は混ぜない
CREDENTIAL_LOCATIONS: tuple[tuple[str, str], ...] = (
    ("header", "token"),
    ("header", "authorization"),
    ("header", "x-access-token"),
    ("query", "token"),
    ("body", "token"),
)

GUEST_TOKEN_LOCATIONS: tuple[tuple[str, str], ...] = (
    ("header", "x-session-id"),
    ("header", "x-guest-session"),
    ("query", "sessionId"),
    ("body", "sessionId"),
)

CREDENTIAL_PREFIXES = ("Bearer ", "Token ", "JWT ")


@dataclass(frozen=True)
class RequestFields:
    """主体解決に使うリクエストの生の値.

    headers のキーは小文字に正規化して保持する。
    """

    headers: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """ヘッダー名を小文字に正規化する."""
        normalized = {str(k).lower(): v for k, v in (self.headers or {}).items()}
        object.__setattr__(self, "headers", normalized)
        object.__setattr__(self, "query", dict(self.query or {}))
        object.__setattr__(self, "body", dict(self.body or {}) if isinstance(self.body, dict) else {})

    def lookup(self, source: str, name: str) -> Any:
        """指定の場所から値を取り出す."""
        if source == "header":
            return self.headers.get(name.lower())
        if source == "query":
            return self.query.get(name)
        if source == "body":
            return self.body.get(name)
        raise ValueError(f"Unknown location: {source}")

    def header(self, name: str) -> str | None:
        """ヘッダー値を取得する（大文字小文字を区別しない）."""
        value = self.headers.get(name.lower())
        return value if isinstance(value, str) else None


def first_present(fields: RequestFields, locations: tuple[tuple[str, str], ...]) -> str | None:
    """場所の並び順で最初に見つかった空でない文字列をそのまま返す."""
    for source, name in locations:
        value = fields.lookup(source, name)
        if isinstance(value, str) and value.strip():
            return value
    return None


def strip_credential_prefix(value: str) -> str:
    """既知のプレフィックスを取り除く."""
    for prefix in CREDENTIAL_PREFIXES:
        if value.startswith(prefix):
            return value[len(prefix):].strip()
    return value.strip()


def extract_credential(fields: RequestFields) -> str | None:
    """ベアラー資格情報を抽出する."""
    raw = first_present(fields, CREDENTIAL_LOCATIONS)
    if raw is None:
        return None
    credential = strip_credential_prefix(raw)
    return credential or None


def extract_guest_token(fields: RequestFields) -> str | None:
    """ゲストセッショントークンを抽出する."""
    raw = first_present(fields, GUEST_TOKEN_LOCATIONS)
    return raw.strip() if raw is not None else None
