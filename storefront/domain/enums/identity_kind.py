"""リクエスト主体の種別の列挙型."""
from enum import Enum


class IdentityKind(str, Enum):
    """リクエストごとに解決される主体の種別."""

    USER = "user"
    GUEST = "guest"
    ANONYMOUS = "anonymous"
