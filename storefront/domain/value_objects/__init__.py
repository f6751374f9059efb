"""値オブジェクトモジュール."""
from .claims import Claims
from .identity import ANONYMOUS_ID, GUEST_ROLE, Identity
from .money import Money
from .route_policy import RoutePolicy
from .session_metadata import SessionMetadata

__all__ = [
    "ANONYMOUS_ID",
    "Claims",
    "GUEST_ROLE",
    "Identity",
    "Money",
    "RoutePolicy",
    "SessionMetadata",
]
