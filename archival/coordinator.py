"""
Shared plumbing for the archive and restore coordinators.

Both coordinators follow the same write discipline:
    1. Resolve the target's ancestor chain (unlocked read)
    2. Take the lock of the patient at the top of the chain
    3. Re-read the chain under the lock and act on that fresh copy
    4. Apply absolute, single-row status writes, counting each one

Invariants:
    - No write happens outside the patient lock
    - Storage and lock failures leave as OperationFailed carrying the number
      of rows already changed
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from domain import EntityDTO, EntityRef

from .adapter import PersistenceAdapter, StorageError
from .errors import OperationFailed
from .graph import GRAPH, ArchivalGraph
from .locks import LockRegistry, LockTimeout
from .snapshot import resolve_chain

logger = logging.getLogger(__name__)


@dataclass
class Progress:
    """Rows changed so far by one operation."""

    changed: int = 0


class Coordinator:
    def __init__(
        self,
        adapter: PersistenceAdapter,
        locks: LockRegistry | None = None,
        graph: ArchivalGraph = GRAPH,
        lock_timeout: float | None = None,
    ) -> None:
        self.adapter = adapter
        self.locks = locks if locks is not None else LockRegistry()
        self.graph = graph
        self.lock_timeout = lock_timeout

    def lock_key(self, chain: list[EntityDTO]) -> EntityRef:
        """Patient at the top of the chain; detached records lock themselves."""
        return chain[0].ref

    @contextmanager
    def locked_chain(self, target: EntityRef, progress: Progress) -> Iterator[list[EntityDTO]]:
        """Hold the patient lock and yield the target's chain read under it."""
        try:
            key = self.lock_key(resolve_chain(self.adapter, target, self.graph))
            with self.locks.hold(key, self.lock_timeout):
                chain = resolve_chain(self.adapter, target, self.graph)
                if self.lock_key(chain) != key:
                    raise OperationFailed(f"{target} moved to another patient while waiting", target=target)
                yield chain
        except StorageError as e:
            logger.error("Storage failure on %s after %d change(s): %s", target, progress.changed, e)
            raise OperationFailed(f"storage failure on {target}: {e}", progress.changed, target) from e
        except LockTimeout as e:
            logger.warning("Lock timeout on %s: %s", target, e)
            raise OperationFailed(str(e), progress.changed, target) from e

    def set_status(self, record: EntityDTO, active: bool, by_cascade: bool, progress: Progress) -> None:
        self.adapter.update(
            record.entity_type,
            record.id,
            {"is_active": active, "archived_by_cascade": by_cascade},
        )
        record.is_active = active
        record.archived_by_cascade = by_cascade
        progress.changed += 1
