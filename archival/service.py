"""
Public entry point of the archival engine.

Every screen that archives or restores a record goes through one
ArchivalService. A restore dialog is a rendering of ``probe``'s result;
the confirm button calls ``commit`` with ``cascade=True``.

Example:
    >>> service = ArchivalService(store)
    >>> service.archive(EntityType.PATIENT, pid).archived_count
    5
    >>> result = service.probe(EntityType.CONSULTATION, cid)
    >>> result.needs_confirmation, result.ancestor.name
    (True, 'Ana Perez')
    >>> service.commit(EntityType.CONSULTATION, cid, cascade=True).restored_count
    5
"""

from __future__ import annotations

import logging

from config import Settings
from domain import EntityRef, EntityType

from .adapter import PersistenceAdapter, StorageError
from .archive import ArchiveCoordinator
from .checker import Violation, check
from .errors import OperationFailed
from .graph import GRAPH, ArchivalGraph
from .locks import LockRegistry
from .restore import RestoreCoordinator
from .results import ArchiveResult, CommitResult, ProbeResult
from .snapshot import load_subtree

logger = logging.getLogger(__name__)


class ArchivalService:
    """Archive, probe, commit and check over one persistence adapter.

    Services built over the same store must share one LockRegistry, or
    the per-patient serialization does not hold.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        settings: Settings | None = None,
        locks: LockRegistry | None = None,
        graph: ArchivalGraph = GRAPH,
    ) -> None:
        settings = settings or Settings()
        self.adapter = adapter
        self.graph = graph
        self.locks = locks if locks is not None else LockRegistry()
        self.archiver = ArchiveCoordinator(
            adapter, self.locks, graph, lock_timeout=settings.lock_timeout_seconds,
        )
        self.restorer = RestoreCoordinator(
            adapter, self.locks, graph,
            lock_timeout=settings.lock_timeout_seconds,
            verify_after_commit=settings.verify_after_commit,
        )

    def archive(self, entity_type: EntityType, entity_id: int) -> ArchiveResult:
        return self.archiver.archive(entity_type, entity_id)

    def probe(self, entity_type: EntityType, entity_id: int) -> ProbeResult:
        return self.restorer.probe(entity_type, entity_id)

    def commit(self, entity_type: EntityType, entity_id: int, cascade: bool = False) -> CommitResult:
        return self.restorer.commit(entity_type, entity_id, cascade)

    def check(self, patient_id: int) -> list[Violation]:
        root = EntityRef(self.graph.root, patient_id)
        try:
            subtree = load_subtree(self.adapter, root, self.graph)
        except StorageError as e:
            raise OperationFailed(f"storage failure on {root}: {e}", target=root) from e
        return check(subtree)
