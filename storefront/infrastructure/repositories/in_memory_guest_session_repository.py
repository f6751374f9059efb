"""ゲストセッションリポジトリのインメモリ実装."""
import copy
import threading
from datetime import datetime

from storefront.domain.entities import GuestSession
from storefront.domain.identifiers import GuestToken
from storefront.domain.ports import GuestSessionAlreadyExistsError, GuestSessionRepository


class InMemoryGuestSessionRepository(GuestSessionRepository):
    """ゲストセッションリポジトリのインメモリ実装."""

    def __init__(self) -> None:
        """初期化."""
        self._lock = threading.Lock()
        self._sessions: dict[str, GuestSession] = {}

    def add(self, session: GuestSession) -> None:
        """新しいセッションを登録する."""
        with self._lock:
            if session.token.value in self._sessions:
                raise GuestSessionAlreadyExistsError(session.token)
            self._sessions[session.token.value] = copy.deepcopy(session)

    def find_by_token(self, token: GuestToken) -> GuestSession | None:
        """トークンで検索する."""
        with self._lock:
            session = self._sessions.get(token.value)
            return copy.deepcopy(session) if session is not None else None

    def update_last_seen(self, token: GuestToken, seen_at: datetime) -> bool:
        """最終アクセス時刻を更新する."""
        with self._lock:
            session = self._sessions.get(token.value)
            if session is None:
                return False
            session.touch(seen_at)
            return True

    def set_migrating(self, token: GuestToken, since: datetime) -> bool:
        """移行中マークを設定する."""
        with self._lock:
            session = self._sessions.get(token.value)
            if session is None:
                return False
            session.mark_migrating(since)
            return True

    def clear_migrating(self, token: GuestToken) -> bool:
        """移行中マークを外す."""
        with self._lock:
            session = self._sessions.get(token.value)
            if session is None:
                return False
            session.clear_migrating()
            return True

    def delete(self, token: GuestToken) -> None:
        """セッションを削除する."""
        with self._lock:
            self._sessions.pop(token.value, None)

    def delete_if_sweepable(self, token: GuestToken, now: datetime) -> bool:
        """期限切れかつ移行中でない場合に限り削除する."""
        with self._lock:
            session = self._sessions.get(token.value)
            if session is None or not session.is_sweepable(now):
                return False
            del self._sessions[token.value]
            return True

    def find_expired(self, now: datetime, limit: int) -> list[GuestSession]:
        """期限切れのセッションを検索する."""
        with self._lock:
            expired = [copy.deepcopy(s) for s in self._sessions.values() if s.is_expired(now)]
        return expired[:limit]

    def find_all(self) -> list[GuestSession]:
        """全セッションを取得する."""
        with self._lock:
            return [copy.deepcopy(s) for s in self._sessions.values()]
