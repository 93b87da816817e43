"""
Storage contract consumed by the archival coordinators.

The adapter is plain storage: no business rules, no multi-row
transactions. Each ``update`` is one independent single-row write.

Implementations:
    - repo.ArchiveRepo: SQLAlchemy over SQLite
    - archival.memory.MemoryStore: in-memory, with fault injection

How to change safely:
    - Adapters must raise ``NotFound`` for missing rows and ``StorageError``
      for any I/O failure; the coordinators rely on nothing else
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

from domain import EntityDTO, EntityType


class StorageError(Exception):
    """I/O failure inside a persistence adapter."""
    pass


class PersistenceAdapter(Protocol):
    """Protocol for record storage backends."""

    def get(self, entity_type: EntityType, entity_id: int) -> EntityDTO:
        """Fetch one record; raises ``NotFound`` when it does not exist."""
        ...

    def update(self, entity_type: EntityType, entity_id: int, fields: Mapping[str, Any]) -> None:
        """Overwrite ``fields`` on one row."""
        ...

    def list_children(self, parent_type: EntityType, parent_id: int) -> list[EntityDTO]:
        """Records attached to the parent through its cascading edges."""
        ...
