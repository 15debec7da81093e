"""Tests for KeyedLock."""

import threading
import time

from libraryloans.ledger.locks import KeyedLock


class TestKeyedLock:
    def test_same_key_is_exclusive(self):
        locks = KeyedLock()
        inside = []
        overlap = []

        def worker():
            with locks.hold("book"):
                inside.append(1)
                if len(inside) > 1:
                    overlap.append(True)
                time.sleep(0.01)
                inside.pop()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert overlap == []

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        entered = threading.Event()

        with locks.hold("a"):
            def other():
                with locks.hold("b"):
                    entered.set()

            t = threading.Thread(target=other)
            t.start()
            assert entered.wait(timeout=2)
            t.join()

    def test_idle_locks_are_dropped(self):
        locks = KeyedLock()
        with locks.hold(1):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_released_on_error(self):
        locks = KeyedLock()
        try:
            with locks.hold("k"):
                raise ValueError
        except ValueError:
            pass

        def reacquire():
            with locks.hold("k"):
                pass

        t = threading.Thread(target=reacquire)
        t.start()
        t.join(timeout=2)
        assert not t.is_alive()
        assert len(locks) == 0
