"""現在時刻の供給."""
from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """UTCの現在時刻を返す."""
    return datetime.now(timezone.utc)
