"""共通フィクスチャ."""
from datetime import datetime, timedelta, timezone

import pytest


class FakeClock:
    """テスト用の手動で進める時計."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """2026-01-01 12:00 UTC から始まる時計."""
    return FakeClock()
