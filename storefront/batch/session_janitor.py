"""期限切れゲストセッションの清掃ジョブ.

スケジュール実行（EventBridge など）または常駐スレッドで定期的に起動し、
期限切れのゲストセッションとそのカート、セッションを失ったゲストカートを削除する。
移行中のセッションは削除しない。
"""
import logging
import threading
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any

from storefront.domain.entities import GuestSession
from storefront.domain.identifiers import OwnerKey
from storefront.domain.ports import CartRepository, GuestSessionRepository
from storefront.domain.services import CartStateEngine, Clock, utc_now

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 2000
DEFAULT_INTERVAL = timedelta(hours=1)
DEFAULT_ORPHAN_CART_MAX_AGE = timedelta(hours=24)


@dataclass(frozen=True)
class SweepResult:
    """1回の清掃の結果."""

    scanned: int = 0
    sessions_deleted: int = 0
    carts_deleted: int = 0
    skipped_migrating: int = 0
    skipped_changed: int = 0
    orphan_carts_deleted: int = 0
    stale_migrations_cleared: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, int]:
        """辞書形式に変換する."""
        return asdict(self)


@dataclass(frozen=True)
class JanitorStats:
    """ゲストセッションとカートの統計."""

    total_sessions: int
    active_sessions: int
    expired_sessions: int
    migrating_sessions: int
    orphaned_carts: int

    def to_dict(self) -> dict[str, int]:
        """辞書形式に変換する."""
        return asdict(self)


class SessionJanitor:
    """期限切れゲストセッションの清掃.

    セッションの削除はストア側で「期限切れかつ移行中でない」ことを条件に行い、
    削除に成功した場合に限り対応するゲストカートを削除する。
    個々の削除の失敗は記録して次へ進み、清掃全体は中断しない。
    """

    def __init__(
        self,
        session_repository: GuestSessionRepository,
        cart_repository: CartRepository,
        engine: CartStateEngine,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        interval: timedelta = DEFAULT_INTERVAL,
        orphan_cart_max_age: timedelta = DEFAULT_ORPHAN_CART_MAX_AGE,
        stale_migration_max_age: timedelta | None = None,
        clock: Clock | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """初期化.

        Args:
            session_repository: ゲストセッションリポジトリ
            cart_repository: カートリポジトリ（孤立カートの検索用）
            engine: カート状態エンジン（カートの削除用）
            batch_size: 1回に処理するセッション数の上限
            interval: 常駐実行時の実行間隔
            orphan_cart_max_age: 孤立カートとみなす未更新期間
            stale_migration_max_age: 移行中マークを強制解除するまでの期間（Noneは無効）
            clock: 現在時刻の供給元
            logger: ロガー
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        self._session_repository = session_repository
        self._cart_repository = cart_repository
        self._engine = engine
        self._batch_size = batch_size
        self._interval = interval
        self._orphan_cart_max_age = orphan_cart_max_age
        self._stale_migration_max_age = stale_migration_max_age
        self._clock = clock or utc_now
        self._logger = logger or logging.getLogger(__name__)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._run_lock = threading.Lock()

    def run_once(self) -> SweepResult:
        """清掃を1回実行する."""
        with self._run_lock:
            counts = dict.fromkeys(SweepResult.__dataclass_fields__, 0)
            self._sweep_expired(counts)
            self._sweep_orphans(counts)
            result = SweepResult(**counts)
        self._logger.info("Session cleanup finished: %s", result.to_dict())
        return result

    def collect_stats(self) -> JanitorStats:
        """セッションとカートの統計を集計する."""
        now = self._clock()
        sessions = self._session_repository.find_all()
        expired = sum(1 for s in sessions if s.is_expired(now))
        migrating = sum(1 for s in sessions if s.is_migrating())
        orphaned = len(self._find_orphan_carts(now))
        return JanitorStats(
            total_sessions=len(sessions),
            active_sessions=len(sessions) - expired,
            expired_sessions=expired,
            migrating_sessions=migrating,
            orphaned_carts=orphaned,
        )

    def start(self) -> None:
        """常駐スレッドを起動する（直ちに1回実行し、以後は一定間隔で実行）."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="session-janitor", daemon=True)
        self._thread.start()
        self._logger.info("Session janitor started (interval=%s)", self._interval)

    def stop(self, timeout: float | None = None) -> None:
        """常駐スレッドを停止する."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        self._logger.info("Session janitor stopped")

    def is_running(self) -> bool:
        """常駐スレッドが動作中か."""
        return self._thread is not None and self._thread.is_alive()

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.run_once()
            except Exception:
                self._logger.exception("Session cleanup run failed")
            self._stop_event.wait(self._interval.total_seconds())

    def _sweep_expired(self, counts: dict[str, int]) -> None:
        now = self._clock()
        try:
            sessions = self._session_repository.find_expired(now, self._batch_size)
        except Exception:
            self._logger.exception("Failed to list expired guest sessions")
            counts["errors"] += 1
            return

        for session in sessions:
            counts["scanned"] += 1
            token = session.token
            try:
                if session.is_migrating():
                    counts["skipped_migrating"] += 1
                    self._release_stale_migration(session, now, counts)
                    continue
                if not self._session_repository.delete_if_sweepable(token, now):
                    # 一覧取得後に移行が始まった、または既に削除された
                    counts["skipped_changed"] += 1
                    continue
                counts["sessions_deleted"] += 1
                self._engine.delete_cart(OwnerKey.for_guest(token))
                counts["carts_deleted"] += 1
            except Exception:
                self._logger.exception("Failed to clean up guest session %s", token.masked())
                counts["errors"] += 1

    def _release_stale_migration(self, session: GuestSession, now: datetime, counts: dict[str, int]) -> None:
        if self._stale_migration_max_age is None or session.migrating_since is None:
            return
        if now - session.migrating_since <= self._stale_migration_max_age:
            return
        if self._session_repository.clear_migrating(session.token):
            counts["stale_migrations_cleared"] += 1
            self._logger.warning(
                "Cleared stale migration flag on %s (since %s)",
                session.token.masked(),
                session.migrating_since.isoformat(),
            )

    def _sweep_orphans(self, counts: dict[str, int]) -> None:
        now = self._clock()
        try:
            orphans = self._find_orphan_carts(now)
        except Exception:
            self._logger.exception("Failed to list orphaned guest carts")
            counts["errors"] += 1
            return

        for owner_key in orphans:
            try:
                with self._engine.exclusive(owner_key):
                    if self._session_repository.find_by_token(owner_key.guest_token()) is not None:
                        continue
                    self._engine.delete_cart(owner_key)
                counts["orphan_carts_deleted"] += 1
            except Exception:
                self._logger.exception("Failed to delete orphaned cart %s", owner_key.guest_token().masked())
                counts["errors"] += 1

    def _find_orphan_carts(self, now: datetime) -> list[OwnerKey]:
        threshold = now - self._orphan_cart_max_age
        carts = self._cart_repository.find_guest_carts_updated_before(threshold, self._batch_size)
        return [
            cart.owner_key
            for cart in carts
            if self._session_repository.find_by_token(cart.owner_key.guest_token()) is None
        ]


def handler(event: dict, context: Any) -> dict:
    """Lambda ハンドラー（スケジュール実行で清掃を1回行う）.

    Args:
        event: Lambda イベント（EventBridgeからのスケジュールイベント）
        context: Lambda コンテキスト

    Returns:
        dict: 実行結果
    """
    from storefront.api.dependencies import Dependencies

    logger.info("Starting session cleanup")
    janitor = Dependencies.get_session_janitor()
    try:
        result = janitor.run_once()
    except Exception as e:
        logger.exception("Session cleanup failed")
        return {"statusCode": 500, "body": {"success": False, "error": str(e)}}

    body: dict[str, Any] = {"success": result.errors == 0, "result": result.to_dict()}
    if (event or {}).get("include_stats"):
        body["stats"] = janitor.collect_stats().to_dict()
    return {"statusCode": 200, "body": body}
