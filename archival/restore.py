"""
Restore coordinator: the two-phase probe/commit protocol.

Restoring a leaf whose patient is archived would leave an active record
under an archived one, so the caller has to agree to restore the whole
patient first.

    probe(type, id)
        Read-only, lock-free. Says whether the restore needs confirmation
        and, if so, which archived ancestor to name.

    commit(type, id, cascade)
        Re-checks under the patient lock, then either restores the target
        alone (ancestors active), refuses (ancestors archived, no cascade),
        or restores the full patient record (ancestors archived, cascade).

State table:

    ancestors     probe                 commit(False)        commit(True)
    active        no confirmation       target only          target only
    archived      needs confirmation    PreconditionFailed   whole patient

A full restore writes the ancestor chain and the target active, root first,
then sweeps the patient tree breadth-first, reactivating every row that an
archive cascade deactivated and whose parent is now active. Rows archived
on their own before the patient was archived stay archived, even on an
escalated commit. The desktop app's "restore with patient" brought back
every consultation and prescription instead; here an archive followed by a
restore returns exactly the earlier state. Every commit runs the sweep,
which also finishes a restore that failed part-way.

Invariants:
    - Commit never returns successfully while the checker reports a
      violation in the patient tree (when verification is on)
    - A rejected commit writes nothing
"""

from __future__ import annotations

import logging

from domain import EntityDTO, EntityRef, EntityType

from .adapter import PersistenceAdapter, StorageError
from .checker import check
from .coordinator import Coordinator, Progress
from .errors import InvariantViolation, OperationFailed, PreconditionFailed
from .graph import GRAPH, ArchivalGraph
from .locks import LockRegistry
from .results import AncestorRef, CommitResult, ProbeResult
from .snapshot import Snapshot, load_subtree, resolve_chain

logger = logging.getLogger(__name__)


class RestoreCoordinator(Coordinator):
    def __init__(
        self,
        adapter: PersistenceAdapter,
        locks: LockRegistry | None = None,
        graph: ArchivalGraph = GRAPH,
        lock_timeout: float | None = None,
        verify_after_commit: bool = True,
    ) -> None:
        super().__init__(adapter, locks, graph, lock_timeout)
        self.verify_after_commit = verify_after_commit

    def probe(self, entity_type: EntityType, entity_id: int) -> ProbeResult:
        target = EntityRef(EntityType(entity_type), entity_id)
        try:
            chain = resolve_chain(self.adapter, target, self.graph)
        except StorageError as e:
            raise OperationFailed(f"storage failure on {target}: {e}", target=target) from e
        return self._probe_chain(target, chain)

    def _probe_chain(self, target: EntityRef, chain: list[EntityDTO]) -> ProbeResult:
        if self.graph.is_root(target.type):
            return ProbeResult(target, needs_confirmation=False)
        archived = [record for record in chain[:-1] if not record.is_active]
        if not archived:
            return ProbeResult(target, needs_confirmation=False)
        # Name the archived ancestor closest to the root, normally the patient
        top = archived[0]
        return ProbeResult(
            target,
            needs_confirmation=True,
            ancestor=AncestorRef(top.entity_type, top.id, top.display_name),
        )

    def commit(self, entity_type: EntityType, entity_id: int, cascade: bool = False) -> CommitResult:
        target = EntityRef(EntityType(entity_type), entity_id)
        progress = Progress()
        with self.locked_chain(target, progress) as chain:
            probe = self._probe_chain(target, chain)
            if probe.needs_confirmation and not cascade:
                logger.warning("Refused restore of %s: %s is archived", target, probe.ancestor.ref)
                raise PreconditionFailed(target, probe.ancestor)

            forced = chain if probe.needs_confirmation else chain[-1:]
            for record in forced:
                if not record.is_active:
                    self.set_status(record, True, False, progress)

            root = chain[0]
            if self.graph.is_root(root.entity_type):
                self._sweep(load_subtree(self.adapter, root.ref, self.graph), progress)
                if self.verify_after_commit:
                    self._verify(load_subtree(self.adapter, root.ref, self.graph), progress)

        logger.info(
            "Restored %s%s: %d row(s) changed",
            target, " with its patient" if probe.needs_confirmation else "", progress.changed,
        )
        return CommitResult(target, progress.changed, escalated=probe.needs_confirmation)

    def _sweep(self, subtree: Snapshot, progress: Progress) -> None:
        # Breadth-first order, so a parent's status is final before its children
        for record in subtree:
            if record.is_active or not record.archived_by_cascade:
                continue
            parent = subtree.parent_of(record.ref)
            if parent is None:
                continue
            if subtree.records[parent].is_active:
                self.set_status(record, True, False, progress)

    def _verify(self, subtree: Snapshot, progress: Progress) -> None:
        violations = check(subtree)
        if violations:
            for violation in violations:
                logger.error("Consistency violation after restore: %s", violation)
            raise InvariantViolation(violations, progress.changed)
