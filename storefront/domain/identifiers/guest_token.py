"""ゲストセッショントークンの値オブジェクト."""
from __future__ import annotations

import secrets
from dataclasses import dataclass

# token_urlsafe(32) は43文字程度のURLセーフ文字列になる
TOKEN_BYTES = 32


@dataclass(frozen=True)
class GuestToken:
    """ゲストセッションの不透明トークン.

    暗号学的乱数から生成し、連番やクライアント由来の値からは導出しない。
    """

    value: str

    def __post_init__(self) -> None:
        """バリデーション."""
        if not self.value or not self.value.strip():
            raise ValueError("GuestToken cannot be empty")
        if ":" in self.value:
            raise ValueError("GuestToken cannot contain ':'")

    @classmethod
    def generate(cls) -> GuestToken:
        """新しいトークンを生成する."""
        return cls(secrets.token_urlsafe(TOKEN_BYTES))

    def masked(self) -> str:
        """ログ出力用に先頭のみ残した表現."""
        return f"{self.value[:8]}..."

    def __str__(self) -> str:
        """文字列表現."""
        return self.value
