"""端末種別の列挙型."""
from enum import Enum


class DeviceType(str, Enum):
    """User-Agent から推定する端末種別."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"
    UNKNOWN = "unknown"

    @classmethod
    def from_user_agent(cls, user_agent: str | None) -> "DeviceType":
        """User-Agent 文字列から端末種別を判定する."""
        if not user_agent:
            return cls.UNKNOWN
        lowered = user_agent.lower()
        if any(marker in lowered for marker in ("mobile", "android", "iphone", "ipad")):
            return cls.MOBILE
        if "tablet" in lowered:
            return cls.TABLET
        return cls.DESKTOP
