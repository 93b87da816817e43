"""
Archival graph: which record types hang off which.

Every relationship the archive and restore coordinators need is declared
here once, so no call site hard-codes "a consultation belongs to a medical
history". An edge either cascades (archiving the parent archives the child,
and the child counts the parent as an ancestor) or is a plain reference
that the engine never follows.

Invariants:
    - Patient is the only root; every other type has exactly one cascading
      parent edge
    - Cascading edges form a tree over entity types (no cycles)
    - The table is read-only at runtime
"""

from __future__ import annotations

from dataclasses import dataclass

from domain import EntityDTO, EntityRef, EntityType

ROOT_TYPE = EntityType.PATIENT


@dataclass(frozen=True)
class Edge:
    """A child -> parent relationship.

    Attributes:
        child_type: Type holding the foreign key
        parent_type: Type the key points at
        parent_key_field: Name of the foreign-key field on the child
        cascades_on_archive: Whether archiving the parent walks this edge
    """

    child_type: EntityType
    parent_type: EntityType
    parent_key_field: str
    cascades_on_archive: bool = True


EDGES: tuple[Edge, ...] = (
    Edge(EntityType.MEDICAL_HISTORY, EntityType.PATIENT, "patient_id"),
    Edge(EntityType.REPRESENTATIVE, EntityType.PATIENT, "patient_id"),
    Edge(EntityType.CONSULTATION, EntityType.MEDICAL_HISTORY, "medical_history_id"),
    Edge(EntityType.PRESCRIPTION, EntityType.MEDICAL_HISTORY, "medical_history_id"),
    Edge(EntityType.PRESCRIPTION, EntityType.CONSULTATION, "consultation_id",
         cascades_on_archive=False),
)


class GraphError(Exception):
    """The edge table is not a valid archival tree."""
    pass


class ArchivalGraph:
    """Lookup helpers over an edge table."""

    def __init__(self, edges: tuple[Edge, ...] = EDGES, root: EntityType = ROOT_TYPE) -> None:
        self.edges = edges
        self.root = root
        self._parent: dict[EntityType, Edge] = {}
        self._children: dict[EntityType, list[Edge]] = {t: [] for t in EntityType}
        for edge in edges:
            self._children[edge.parent_type].append(edge)
            if edge.cascades_on_archive:
                if edge.child_type in self._parent:
                    raise GraphError(f"{edge.child_type.value} has two cascading parents")
                self._parent[edge.child_type] = edge
        self.validate()

    def validate(self) -> None:
        if self.root in self._parent:
            raise GraphError(f"root {self.root.value} cannot have a parent")
        for entity_type in EntityType:
            if entity_type is self.root:
                continue
            if entity_type not in self._parent:
                raise GraphError(f"{entity_type.value} has no cascading parent edge")
            # Every chain must end at the root within len(EntityType) hops
            seen = {entity_type}
            current = entity_type
            while current is not self.root:
                current = self._parent[current].parent_type
                if current in seen:
                    raise GraphError(f"cycle through {current.value}")
                seen.add(current)

    def is_root(self, entity_type: EntityType) -> bool:
        return entity_type is self.root

    def is_leaf(self, entity_type: EntityType) -> bool:
        return not self.child_edges(entity_type)

    def parent_edge(self, entity_type: EntityType) -> Edge | None:
        """Cascading edge to the parent, ``None`` for the root."""
        return self._parent.get(entity_type)

    def child_edges(self, entity_type: EntityType, cascading_only: bool = True) -> list[Edge]:
        return [e for e in self._children[entity_type]
                if e.cascades_on_archive or not cascading_only]

    def ancestor_types(self, entity_type: EntityType) -> list[EntityType]:
        """Types above ``entity_type``, nearest first."""
        out = []
        edge = self.parent_edge(entity_type)
        while edge is not None:
            out.append(edge.parent_type)
            edge = self.parent_edge(edge.parent_type)
        return out

    def parent_ref(self, record: EntityDTO) -> EntityRef | None:
        """Reference to the record's cascading parent, if it has one set."""
        edge = self.parent_edge(record.entity_type)
        if edge is None:
            return None
        parent_id = getattr(record, edge.parent_key_field)
        if parent_id is None:
            return None
        return EntityRef(edge.parent_type, parent_id)


GRAPH = ArchivalGraph()
