"""リクエスト単位で解決される主体."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..enums import IdentityKind
from ..identifiers import GuestToken, OwnerKey, UserId

ANONYMOUS_ID = "anonymous"
ANONYMOUS_ROLE = "anonymous"
GUEST_ROLE = "guest"


@dataclass(frozen=True)
class Identity:
    """1リクエストにつきちょうど1つ解決される主体（永続化しない）.

    USER と GUEST は空でない id を持つ。ANONYMOUS は固定の番兵 id を使い、
    ロール制限付きのチェックを満たすことはない。
    """

    kind: IdentityKind
    id: str
    role: str
    credential_expiry: datetime | None = None

    def __post_init__(self) -> None:
        """バリデーション."""
        if self.kind in (IdentityKind.USER, IdentityKind.GUEST) and not self.id:
            raise ValueError(f"{self.kind.value} identity requires a non-empty id")
        if self.kind == IdentityKind.ANONYMOUS and self.id != ANONYMOUS_ID:
            raise ValueError("Anonymous identity must use the sentinel id")

    @classmethod
    def user(cls, user_id: str, role: str, credential_expiry: datetime | None = None) -> Identity:
        """認証済みユーザーの主体を生成する."""
        return cls(IdentityKind.USER, user_id, role, credential_expiry)

    @classmethod
    def guest(cls, token: GuestToken) -> Identity:
        """ゲストセッションの主体を生成する."""
        return cls(IdentityKind.GUEST, token.value, GUEST_ROLE)

    @classmethod
    def anonymous(cls) -> Identity:
        """匿名の主体を生成する."""
        return cls(IdentityKind.ANONYMOUS, ANONYMOUS_ID, ANONYMOUS_ROLE)

    def is_user(self) -> bool:
        """認証済みユーザーか判定する."""
        return self.kind == IdentityKind.USER

    def is_guest(self) -> bool:
        """ゲストか判定する."""
        return self.kind == IdentityKind.GUEST

    def is_anonymous(self) -> bool:
        """匿名か判定する."""
        return self.kind == IdentityKind.ANONYMOUS

    def satisfies_roles(self, allowed_roles: frozenset[str]) -> bool:
        """ロール制限を満たすか判定する（制限なしは常に真）."""
        if not allowed_roles:
            return True
        if self.is_anonymous():
            return False
        return self.role in allowed_roles

    def owner_key(self) -> OwnerKey | None:
        """カートの所有者キーを返す（匿名はカートを持たない）."""
        if self.is_user():
            return OwnerKey.for_user(UserId(self.id))
        if self.is_guest():
            return OwnerKey.for_guest(GuestToken(self.id))
        return None
