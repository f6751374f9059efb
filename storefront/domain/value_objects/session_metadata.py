"""ゲストセッション作成時のリクエストメタデータ."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..enums import DeviceType

USER_AGENT_MAX_LENGTH = 256


@dataclass(frozen=True)
class SessionMetadata:
    """ゲストセッションに記録する接続元情報."""

    ip_address: str | None = None
    user_agent: str | None = None
    referrer: str | None = None
    device_type: DeviceType = DeviceType.UNKNOWN

    @classmethod
    def from_request(
        cls,
        ip_address: str | None,
        user_agent: str | None,
        referrer: str | None = None,
    ) -> SessionMetadata:
        """リクエスト情報から生成する（端末種別は User-Agent から推定）."""
        if user_agent:
            user_agent = user_agent[:USER_AGENT_MAX_LENGTH]
        return cls(
            ip_address=ip_address,
            user_agent=user_agent,
            referrer=referrer,
            device_type=DeviceType.from_user_agent(user_agent),
        )

    def to_dict(self) -> dict[str, Any]:
        """辞書形式に変換する."""
        return {
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "referrer": self.referrer,
            "device_type": self.device_type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SessionMetadata:
        """辞書形式から復元する."""
        if not data:
            return cls()
        return cls(
            ip_address=data.get("ip_address"),
            user_agent=data.get("user_agent"),
            referrer=data.get("referrer"),
            device_type=DeviceType(data.get("device_type") or DeviceType.UNKNOWN.value),
        )
