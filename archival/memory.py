"""
In-memory persistence adapter.

Used by the test suite and for trying the engine without a database. Besides
the adapter protocol it can inject write failures, which is how the tests
simulate a crash in the middle of a cascade.

Example:
    >>> store = MemoryStore()
    >>> pid = store.create(PatientDTO(full_name="Ana"))
    >>> store.fail_after(2)       # third write from now raises StorageError
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from typing import Any, Mapping

from domain import EntityDTO, EntityRef, EntityType

from .adapter import StorageError
from .errors import NotFound
from .graph import GRAPH, ArchivalGraph
from .snapshot import Snapshot

logger = logging.getLogger(__name__)


class MemoryStore:
    """Dict-backed store; returns copies so callers never alias stored rows.

    Attributes:
        writes: Successful ``update`` calls so far
    """

    def __init__(self, graph: ArchivalGraph = GRAPH) -> None:
        self.graph = graph
        self._rows: dict[EntityRef, EntityDTO] = {}
        self._next_id: dict[EntityType, int] = defaultdict(lambda: 1)
        self.writes = 0
        self._writes_left: int | None = None

    def fail_after(self, writes: int | None) -> None:
        """Let ``writes`` more updates succeed, then fail every later one. ``None`` disarms."""
        self._writes_left = writes

    def create(self, dto: EntityDTO) -> int:
        entity_type = dto.entity_type
        new_id = self._next_id[entity_type]
        self._next_id[entity_type] += 1
        row = replace(dto, id=new_id)
        self._rows[row.ref] = row
        return new_id

    def get(self, entity_type: EntityType, entity_id: int) -> EntityDTO:
        ref = EntityRef(EntityType(entity_type), entity_id)
        row = self._rows.get(ref)
        if row is None:
            raise NotFound(ref)
        return replace(row)

    def update(self, entity_type: EntityType, entity_id: int, fields: Mapping[str, Any]) -> None:
        ref = EntityRef(EntityType(entity_type), entity_id)
        if self._writes_left is not None:
            if self._writes_left <= 0:
                logger.debug("Injecting write failure on %s", ref)
                raise StorageError(f"injected write failure on {ref}")
            self._writes_left -= 1
        row = self._rows.get(ref)
        if row is None:
            raise NotFound(ref)
        unknown = set(fields) - (row.field_names() - {"id"})
        if unknown:
            raise ValueError(f"unknown field(s) for {ref.type.value}: {sorted(unknown)}")
        self._rows[ref] = replace(row, **fields)
        self.writes += 1

    def list_children(self, parent_type: EntityType, parent_id: int) -> list[EntityDTO]:
        out = []
        for edge in self.graph.child_edges(EntityType(parent_type)):
            rows = [r for ref, r in self._rows.items()
                    if ref.type is edge.child_type and getattr(r, edge.parent_key_field) == parent_id]
            out.extend(replace(r) for r in sorted(rows, key=lambda r: r.id))
        return out

    def delete(self, entity_type: EntityType, entity_id: int) -> None:
        """Drop a row outright; lets tests build dangling references."""
        self._rows.pop(EntityRef(EntityType(entity_type), entity_id), None)

    def records(self) -> list[EntityDTO]:
        return [replace(r) for r in self._rows.values()]

    def snapshot(self) -> Snapshot:
        return Snapshot.from_records(self.records(), graph=self.graph)
