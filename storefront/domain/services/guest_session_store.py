"""ゲストセッションストア."""
import logging
from datetime import datetime, timedelta

from ..entities import GuestSession
from ..entities.guest_session import DEFAULT_TTL
from ..identifiers import GuestToken
from ..ports import GuestSessionAlreadyExistsError, GuestSessionRepository
from ..value_objects import SessionMetadata

from .clock import Clock, utc_now

# トークン衝突時の再発行回数
MAX_ISSUE_ATTEMPTS = 3


class GuestSessionNotFoundError(Exception):
    """ゲストセッションが見つからないエラー."""

    def __init__(self, token: GuestToken) -> None:
        self.token = token
        super().__init__(f"Guest session not found: {token.masked()}")


class GuestSessionStore:
    """ゲストセッションの発行・参照・失効判定を行う.

    有効期限は作成時点から固定（スライディング延長はしない）。
    touch は最終アクセス時刻のみ更新する。
    """

    def __init__(
        self,
        repository: GuestSessionRepository,
        ttl: timedelta = DEFAULT_TTL,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """初期化.

        Args:
            repository: ゲストセッションリポジトリ
            ttl: セッションの有効期間
            clock: 現在時刻の供給元
            logger: ロガー
        """
        if ttl <= timedelta(0):
            raise ValueError("Guest session TTL must be positive")
        self._repository = repository
        self._ttl = ttl
        self._clock = clock or utc_now
        self._logger = logger or logging.getLogger(__name__)

    @property
    def ttl(self) -> timedelta:
        """セッションの有効期間."""
        return self._ttl

    def now(self) -> datetime:
        """ストアが使う現在時刻."""
        return self._clock()

    def create(self, metadata: SessionMetadata | None = None) -> GuestSession:
        """新しいゲストセッションを発行して保存する.

        Raises:
            GuestSessionAlreadyExistsError: トークン衝突が続いた場合
        """
        for attempt in range(1, MAX_ISSUE_ATTEMPTS + 1):
            session = GuestSession.issue(now=self._clock(), ttl=self._ttl, metadata=metadata)
            try:
                self._repository.add(session)
            except GuestSessionAlreadyExistsError:
                if attempt == MAX_ISSUE_ATTEMPTS:
                    raise
                self._logger.warning("Guest token collision, reissuing (attempt %d)", attempt)
                continue
            self._logger.info(
                "Guest session created: %s (device=%s)",
                session.token.masked(),
                session.metadata.device_type.value,
            )
            return session
        raise RuntimeError("unreachable")

    def find_by_token(self, token: GuestToken) -> GuestSession | None:
        """トークンでセッションを検索する（見つからない場合はNone）."""
        return self._repository.find_by_token(token)

    def is_expired(self, session: GuestSession) -> bool:
        """セッションが期限切れか判定する."""
        return session.is_expired(self._clock())

    def touch(self, session: GuestSession) -> None:
        """最終アクセス時刻を更新する."""
        now = self._clock()
        if self._repository.update_last_seen(session.token, now):
            session.touch(now)

    def mark_migrating(self, session: GuestSession) -> None:
        """カート移行中としてマークする.

        Raises:
            GuestSessionNotFoundError: セッションが既に存在しない場合
        """
        now = self._clock()
        if not self._repository.set_migrating(session.token, now):
            raise GuestSessionNotFoundError(session.token)
        session.mark_migrating(now)
        self._logger.info("Guest session marked migrating: %s", session.token.masked())

    def clear_migrating(self, session: GuestSession) -> None:
        """カート移行中のマークを外す（セッションが消えていれば何もしない）."""
        if self._repository.clear_migrating(session.token):
            self._logger.info("Guest session migration cleared: %s", session.token.masked())
        session.clear_migrating()

    def delete(self, session: GuestSession) -> None:
        """セッションを削除する."""
        self._repository.delete(session.token)
        self._logger.info("Guest session deleted: %s", session.token.masked())

    def restore(self, session: GuestSession) -> None:
        """削除したセッションを同じトークンで登録し直す（既に存在すれば何もしない）."""
        try:
            self._repository.add(session)
        except GuestSessionAlreadyExistsError:
            return
        self._logger.info("Guest session restored: %s", session.token.masked())
