from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterator, Optional

from ..core.exceptions import StorageUnavailableError


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class KeyedLock:
    """One mutex per key (task id, or task id + location).

    Entries are created on demand and dropped once no thread holds or waits
    on them, so the registry only grows with the number of in-flight keys.
    """

    def __init__(self, *, timeout: Optional[float] = None):
        self._guard = threading.Lock()
        self._entries: Dict[Hashable, _Entry] = {}
        self._timeout = timeout

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, _Entry())
            entry.users += 1

        acquired = False
        try:
            acquired = entry.lock.acquire(timeout=-1 if self._timeout is None else self._timeout)
            if not acquired:
                raise StorageUnavailableError("Another submission for this task is still in progress, please retry")
            yield
        finally:
            if acquired:
                entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    self._entries.pop(key, None)

    def active_keys(self) -> int:
        with self._guard:
            return len(self._entries)
