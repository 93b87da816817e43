"""
Archive coordinator.

Archiving a record deactivates it and everything below it along cascading
edges. For a patient that is the medical history, representatives,
consultations and prescriptions; for a leaf it is the single row. The
parent is never touched.

Writes go breadth-first from the target down. Rows that are already
inactive are skipped and not counted, but the walk still descends through
them, so repeating the call after a failure finishes the job.

Archiving a target that an earlier cascade already deactivated changes no
status, but clears its cascade marker so a later restore of the ancestor
leaves it archived.
"""

from __future__ import annotations

import logging

from domain import EntityRef, EntityType

from .coordinator import Coordinator, Progress
from .results import ArchiveResult
from .snapshot import load_subtree

logger = logging.getLogger(__name__)


class ArchiveCoordinator(Coordinator):
    def archive(self, entity_type: EntityType, entity_id: int) -> ArchiveResult:
        target = EntityRef(EntityType(entity_type), entity_id)
        progress = Progress()
        with self.locked_chain(target, progress):
            subtree = load_subtree(self.adapter, target, self.graph)
            for record in subtree:
                if record.is_active:
                    self.set_status(record, False, record.ref != target, progress)
                elif record.ref == target and record.archived_by_cascade:
                    # Now archived on its own account; not counted as a change
                    self.adapter.update(record.entity_type, record.id, {"archived_by_cascade": False})
        logger.info("Archived %s: %d row(s) changed", target, progress.changed)
        return ArchiveResult(target, progress.changed)
