"""カート所有者キーの値オブジェクト."""
from __future__ import annotations

from dataclasses import dataclass

from .guest_token import GuestToken
from .user_id import UserId

USER_PREFIX = "user"
GUEST_PREFIX = "guest"


@dataclass(frozen=True)
class OwnerKey:
    """カートの保存キー（"user:<id>" または "guest:<token>"）."""

    value: str

    def __post_init__(self) -> None:
        """バリデーション."""
        prefix, sep, subject = self.value.partition(":")
        if not sep or not subject:
            raise ValueError(f"Invalid owner key: {self.value!r}")
        if prefix not in (USER_PREFIX, GUEST_PREFIX):
            raise ValueError(f"Unknown owner key prefix: {prefix!r}")

    @classmethod
    def for_user(cls, user_id: UserId) -> OwnerKey:
        """ユーザーカートのキーを生成する."""
        return cls(f"{USER_PREFIX}:{user_id.value}")

    @classmethod
    def for_guest(cls, token: GuestToken) -> OwnerKey:
        """ゲストカートのキーを生成する."""
        return cls(f"{GUEST_PREFIX}:{token.value}")

    @property
    def prefix(self) -> str:
        """キーの種別部分."""
        return self.value.partition(":")[0]

    @property
    def subject(self) -> str:
        """ユーザーIDまたはゲストトークン部分."""
        return self.value.partition(":")[2]

    def is_guest(self) -> bool:
        """ゲストカートのキーか判定する."""
        return self.prefix == GUEST_PREFIX

    def is_user(self) -> bool:
        """ユーザーカートのキーか判定する."""
        return self.prefix == USER_PREFIX

    def guest_token(self) -> GuestToken:
        """ゲストカートのキーからトークンを取り出す."""
        if not self.is_guest():
            raise ValueError(f"Not a guest owner key: {self.value}")
        return GuestToken(self.subject)

    def __str__(self) -> str:
        """文字列表現."""
        return self.value
