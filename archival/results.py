"""Return values of the public archival operations."""

from __future__ import annotations

from dataclasses import dataclass

from domain import EntityRef, EntityType


@dataclass(frozen=True)
class ArchiveResult:
    target: EntityRef
    archived_count: int


@dataclass(frozen=True)
class AncestorRef:
    """Archived ancestor shown to the user before an escalated restore."""

    type: EntityType
    id: int
    name: str

    @property
    def ref(self) -> EntityRef:
        return EntityRef(self.type, self.id)


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of the read-only restore phase.

    Attributes:
        target: Record the caller wants to restore
        needs_confirmation: True when restoring it requires restoring the
            whole patient record first
        ancestor: The archived ancestor to name in the confirmation
    """

    target: EntityRef
    needs_confirmation: bool
    ancestor: AncestorRef | None = None


@dataclass(frozen=True)
class CommitResult:
    target: EntityRef
    restored_count: int
    escalated: bool = False
