import threading
import time

import pytest

from src.custody_tracker.custody_tracker.common.locks import KeyedLock
from src.custody_tracker.custody_tracker.core.exceptions import StorageUnavailableError


def test_entries_are_dropped_after_release():
    locks = KeyedLock()
    with locks.hold("task-1"):
        assert locks.active_keys() == 1
    assert locks.active_keys() == 0


def test_same_key_is_serialized():
    locks = KeyedLock()
    inside = []
    overlap = []

    def worker():
        with locks.hold("task-1"):
            if inside:
                overlap.append(True)
            inside.append(True)
            time.sleep(0.01)
            inside.pop()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert overlap == []
    assert locks.active_keys() == 0


def test_different_keys_do_not_block_each_other():
    locks = KeyedLock(timeout=0.1)
    with locks.hold("task-1"):
        with locks.hold("task-2"):
            assert locks.active_keys() == 2


def test_timeout_raises_storage_unavailable():
    locks = KeyedLock(timeout=0.05)
    held = threading.Event()
    release = threading.Event()

    def holder():
        with locks.hold("task-1"):
            held.set()
            release.wait(2)

    t = threading.Thread(target=holder)
    t.start()
    held.wait(2)
    try:
        with pytest.raises(StorageUnavailableError):
            with locks.hold("task-1"):
                pass
    finally:
        release.set()
        t.join()

    assert locks.active_keys() == 0
