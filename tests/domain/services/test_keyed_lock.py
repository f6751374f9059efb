"""KeyedLockのテスト."""
import threading
import time
from concurrent.futures import ThreadPoolExecutor

from storefront.domain.services import KeyedLock


class TestKeyedLock:
    """KeyedLockの単体テスト."""

    def test_同じキーは直列化される(self) -> None:
        locks = KeyedLock()
        active = 0
        max_active = 0
        guard = threading.Lock()

        def work() -> None:
            nonlocal active, max_active
            with locks.hold("k"):
                with guard:
                    active += 1
                    max_active = max(max_active, active)
                time.sleep(0.001)
                with guard:
                    active -= 1

        with ThreadPoolExecutor(max_workers=8) as pool:
            for future in [pool.submit(work) for _ in range(40)]:
                future.result()

        assert max_active == 1

    def test_再入できる(self) -> None:
        locks = KeyedLock()
        with locks.hold("a", "b"):
            with locks.hold("b"):
                assert locks.active_keys() == 2

    def test_解放後はロックを破棄する(self) -> None:
        locks = KeyedLock()
        with locks.hold("a", "a", "b"):
            pass
        assert locks.active_keys() == 0

    def test_異なるキーは並行に獲得できる(self) -> None:
        locks = KeyedLock()
        entered = threading.Event()
        release = threading.Event()

        def hold_a() -> None:
            with locks.hold("a"):
                entered.set()
                release.wait(5)

        thread = threading.Thread(target=hold_a)
        thread.start()
        assert entered.wait(5)
        with locks.hold("b"):
            pass
        release.set()
        thread.join(5)
