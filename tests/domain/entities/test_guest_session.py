"""GuestSessionのテスト."""
from datetime import timedelta

from storefront.domain.entities import GuestSession


class TestGuestSession:
    """GuestSessionの単体テスト."""

    def test_issueで有効期限を設定(self, clock) -> None:
        session = GuestSession.issue(now=clock(), ttl=timedelta(hours=24))
        assert session.expires_at == clock() + timedelta(hours=24)
        assert session.last_seen_at == clock()
        assert session.is_migrating() is False

    def test_有効期限ちょうどはまだ有効(self, clock) -> None:
        session = GuestSession.issue(now=clock(), ttl=timedelta(hours=1))
        assert session.is_expired(session.expires_at) is False
        assert session.is_expired(session.expires_at + timedelta(seconds=1)) is True

    def test_touchは有効期限を延長しない(self, clock) -> None:
        session = GuestSession.issue(now=clock(), ttl=timedelta(hours=1))
        later = clock() + timedelta(minutes=30)
        session.touch(later)
        assert session.last_seen_at == later
        assert session.expires_at == clock() + timedelta(hours=1)

    def test_移行中は清掃対象外(self, clock) -> None:
        session = GuestSession.issue(now=clock(), ttl=timedelta(hours=1))
        after_expiry = clock() + timedelta(hours=2)
        assert session.is_sweepable(after_expiry) is True
        session.mark_migrating(clock())
        assert session.is_sweepable(after_expiry) is False
        session.clear_migrating()
        assert session.is_sweepable(after_expiry) is True
