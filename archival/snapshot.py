"""
In-memory views of a patient record tree.

A Snapshot is what the checker inspects and what the coordinators walk.
It is built either by reading a subtree through an adapter
(``load_subtree``) or directly from a list of records
(``Snapshot.from_records``), in which case parent links are taken from the
records' foreign keys and may point outside the snapshot.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from domain import EntityDTO, EntityRef

from .adapter import PersistenceAdapter
from .graph import GRAPH, ArchivalGraph

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    """Records keyed by reference, in breadth-first order where loaded from a root.

    Attributes:
        records: Record per reference
        order: Iteration order; parents come before children when the
            snapshot was loaded with ``load_subtree``
        root: Reference the subtree was loaded from, if any
    """

    records: dict[EntityRef, EntityDTO]
    order: list[EntityRef]
    root: EntityRef | None = None
    graph: ArchivalGraph = field(default=GRAPH, repr=False)

    @classmethod
    def from_records(
        cls,
        records: Iterable[EntityDTO],
        root: EntityRef | None = None,
        graph: ArchivalGraph = GRAPH,
    ) -> Snapshot:
        by_ref: dict[EntityRef, EntityDTO] = {}
        for record in records:
            by_ref[record.ref] = record
        return cls(records=by_ref, order=list(by_ref), root=root, graph=graph)

    def __iter__(self) -> Iterator[EntityDTO]:
        return (self.records[ref] for ref in self.order)

    def __len__(self) -> int:
        return len(self.order)

    def get(self, ref: EntityRef) -> EntityDTO | None:
        return self.records.get(ref)

    def parent_of(self, ref: EntityRef) -> EntityRef | None:
        return self.graph.parent_ref(self.records[ref])

    def ancestors_of(self, ref: EntityRef) -> list[EntityRef]:
        """Ancestor references, nearest first, stopping at the first one not in the snapshot."""
        out = []
        parent = self.parent_of(ref)
        while parent is not None:
            out.append(parent)
            if parent not in self.records:
                break
            parent = self.parent_of(parent)
        return out

    def status(self) -> dict[EntityRef, bool]:
        return {ref: self.records[ref].is_active for ref in self.order}


def load_subtree(
    adapter: PersistenceAdapter,
    root: EntityRef,
    graph: ArchivalGraph = GRAPH,
) -> Snapshot:
    """Read ``root`` and everything below it along cascading edges, breadth-first."""
    first = adapter.get(root.type, root.id)
    records: dict[EntityRef, EntityDTO] = {root: first}
    order = [root]
    queue = deque([first])
    while queue:
        node = queue.popleft()
        if graph.is_leaf(node.entity_type):
            continue
        for child in adapter.list_children(node.entity_type, node.id):
            if child.ref in records:
                continue
            records[child.ref] = child
            order.append(child.ref)
            queue.append(child)
    logger.debug("Loaded %d record(s) under %s", len(order), root)
    return Snapshot(records=records, order=order, root=root, graph=graph)


def resolve_chain(
    adapter: PersistenceAdapter,
    target: EntityRef,
    graph: ArchivalGraph = GRAPH,
) -> list[EntityDTO]:
    """Target and its ancestors, root first, target last.

    A detached record (no parent key set) yields a one-element chain.
    Raises ``NotFound`` for the target or for a dangling ancestor key.
    """
    chain = [adapter.get(target.type, target.id)]
    parent = graph.parent_ref(chain[0])
    while parent is not None:
        record = adapter.get(parent.type, parent.id)
        chain.append(record)
        parent = graph.parent_ref(record)
    chain.reverse()
    return chain
