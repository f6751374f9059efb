"""所有者キー単位の排他ロック."""
import threading
from collections.abc import Iterator
from contextlib import ExitStack, contextmanager


class KeyedLock:
    """キーごとの再入可能ロックを管理する.

    使われていないキーのロックは解放時に破棄する。
    複数キーは引数の順に獲得するため、呼び出し側は常に同じ順序で渡すこと。
    """

    def __init__(self) -> None:
        """初期化."""
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}
        self._holders: dict[str, int] = {}

    @contextmanager
    def hold(self, *keys: str) -> Iterator[None]:
        """指定キーのロックを順に獲得する."""
        ordered: list[str] = []
        for key in keys:
            if key not in ordered:
                ordered.append(key)

        with ExitStack() as stack:
            for key in ordered:
                lock = self._checkout(key)
                stack.callback(self._checkin, key)
                lock.acquire()
                stack.callback(lock.release)
            yield

    def active_keys(self) -> int:
        """ロックを保持中または待機中のキー数."""
        with self._guard:
            return len(self._locks)

    def _checkout(self, key: str) -> threading.RLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            self._holders[key] = self._holders.get(key, 0) + 1
            return lock

    def _checkin(self, key: str) -> None:
        with self._guard:
            remaining = self._holders.get(key, 0) - 1
            if remaining <= 0:
                self._holders.pop(key, None)
                self._locks.pop(key, None)
            else:
                self._holders[key] = remaining
