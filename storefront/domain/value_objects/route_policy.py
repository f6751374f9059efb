"""ルートごとの認証ポリシー."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class RoutePolicy:
    """ルートの認証要件（シリアライズ可能なデータとして扱う）.

    Attributes:
        require_auth: 主体が解決できない場合に拒否するか
        allowed_roles: 許可ロール（空ならロール制限なし）
        allow_guest: ゲストセッションを受け付けるか
    """

    require_auth: bool = True
    allowed_roles: frozenset[str] = field(default_factory=frozenset)
    allow_guest: bool = False

    def __post_init__(self) -> None:
        """リストや集合で渡されたロールを frozenset に正規化する."""
        if not isinstance(self.allowed_roles, frozenset):
            object.__setattr__(self, "allowed_roles", frozenset(self.allowed_roles))

    def auto_provisions_guest(self) -> bool:
        """未解決時にゲストセッションを自動発行するか."""
        return self.allow_guest and not self.require_auth

    def to_dict(self) -> dict[str, Any]:
        """辞書形式に変換する."""
        return {
            "require_auth": self.require_auth,
            "allowed_roles": sorted(self.allowed_roles),
            "allow_guest": self.allow_guest,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoutePolicy:
        """辞書形式から復元する."""
        return cls(
            require_auth=bool(data.get("require_auth", True)),
            allowed_roles=frozenset(data.get("allowed_roles") or ()),
            allow_guest=bool(data.get("allow_guest", False)),
        )


ADMIN_ONLY = RoutePolicy(require_auth=True, allowed_roles=frozenset({"admin"}))
STORE_OWNER_ONLY = RoutePolicy(require_auth=True, allowed_roles=frozenset({"store"}))
CUSTOMER_ONLY = RoutePolicy(require_auth=True, allowed_roles=frozenset({"customer"}))
DRIVER_ONLY = RoutePolicy(require_auth=True, allowed_roles=frozenset({"driver"}))
STAFF_ONLY = RoutePolicy(require_auth=True, allowed_roles=frozenset({"admin", "store"}))
AUTHENTICATED_USER = RoutePolicy(require_auth=True)
USER_OR_GUEST = RoutePolicy(require_auth=False, allow_guest=True)
GUEST_CART = RoutePolicy(require_auth=False, allow_guest=True)
USER_CART = RoutePolicy(
    require_auth=False,
    allowed_roles=frozenset({"customer", "store", "admin", "guest"}),
    allow_guest=True,
)
PUBLIC = RoutePolicy(require_auth=False)
