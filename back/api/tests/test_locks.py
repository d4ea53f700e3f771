import threading
import time

from workspot.services.locks import KeyedLock


def test_same_key_is_mutually_exclusive():
    locks = KeyedLock()
    inside = 0
    max_inside = 0
    guard = threading.Lock()

    def worker():
        nonlocal inside, max_inside
        with locks.hold("spot-1"):
            with guard:
                inside += 1
                max_inside = max(max_inside, inside)
            time.sleep(0.01)
            with guard:
                inside -= 1

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert max_inside == 1


def test_different_keys_do_not_contend():
    locks = KeyedLock()
    acquired_other = threading.Event()

    def other():
        with locks.hold("spot-2"):
            acquired_other.set()

    with locks.hold("spot-1"):
        t = threading.Thread(target=other)
        t.start()
        assert acquired_other.wait(timeout=2)
        t.join()


def test_entries_are_released_when_unused():
    locks = KeyedLock()
    with locks.hold("a"):
        with locks.hold("b"):
            assert len(locks) == 2
    assert len(locks) == 0


def test_lock_released_on_exception():
    locks = KeyedLock()
    try:
        with locks.hold("a"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert len(locks) == 0
    with locks.hold("a"):
        pass
