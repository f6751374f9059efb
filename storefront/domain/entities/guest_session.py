"""ゲストセッションエンティティ."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from ..identifiers import GuestToken
from ..value_objects import SessionMetadata

DEFAULT_TTL = timedelta(hours=24)


@dataclass
class GuestSession:
    """サーバーが発行する期限付きの未認証セッション.

    有効期限は作成時点から固定で、アクセスのたびに延長はしない。
    """

    token: GuestToken
    created_at: datetime
    expires_at: datetime
    last_seen_at: datetime
    migrating_since: datetime | None = None
    metadata: SessionMetadata = field(default_factory=SessionMetadata)

    @classmethod
    def issue(
        cls,
        now: datetime | None = None,
        ttl: timedelta = DEFAULT_TTL,
        metadata: SessionMetadata | None = None,
    ) -> GuestSession:
        """新しいトークンでセッションを発行する."""
        now = now or datetime.now(timezone.utc)
        return cls(
            token=GuestToken.generate(),
            created_at=now,
            expires_at=now + ttl,
            last_seen_at=now,
            metadata=metadata or SessionMetadata(),
        )

    def is_expired(self, now: datetime) -> bool:
        """期限切れか判定する."""
        return now > self.expires_at

    def is_migrating(self) -> bool:
        """カート移行中か判定する."""
        return self.migrating_since is not None

    def is_sweepable(self, now: datetime) -> bool:
        """清掃ジョブが削除してよい状態か判定する."""
        return self.is_expired(now) and not self.is_migrating()

    def touch(self, now: datetime) -> None:
        """最終アクセス時刻を更新する（有効期限は変えない）."""
        self.last_seen_at = now

    def mark_migrating(self, now: datetime) -> None:
        """カート移行中としてマークする."""
        self.migrating_since = now

    def clear_migrating(self) -> None:
        """カート移行中のマークを外す."""
        self.migrating_since = None
