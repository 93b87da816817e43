"""
Single-flight locks keyed by patient.

Archive and restore commits on the same patient tree run one at a time;
different patients never contend. Entries are dropped once nobody holds or
waits on them, so the registry does not grow with the number of patients
ever touched.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Hashable, Iterator

logger = logging.getLogger(__name__)


class LockTimeout(Exception):
    """Lock could not be acquired within the timeout."""

    def __init__(self, key: Hashable, timeout: float) -> None:
        super().__init__(f"timed out after {timeout}s waiting for {key}")
        self.key = key
        self.timeout = timeout


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class LockRegistry:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[Hashable, _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: Hashable, timeout: float | None = None) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(key, _Entry())
            entry.users += 1
        try:
            if not entry.lock.acquire(timeout=-1 if timeout is None else timeout):
                raise LockTimeout(key, timeout)
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]
