"""
Consistency checker for archived record trees.

The rule: no active record may have an inactive ancestor. ``check`` is a
pure function over a Snapshot; it never reads storage. It runs after every
restore commit and serves as the oracle for the randomized operation tests.
"""

from __future__ import annotations

from dataclasses import dataclass

from domain import EntityRef

from .snapshot import Snapshot

INACTIVE_ANCESTOR = "inactive_ancestor"
MISSING_PARENT = "missing_parent"


@dataclass(frozen=True)
class Violation:
    """An active record whose ancestor chain is broken.

    Attributes:
        node: The active record
        ancestor: The nearest inactive ancestor, or the parent reference
            that is missing from the snapshot
        kind: ``inactive_ancestor`` or ``missing_parent``
    """

    node: EntityRef
    ancestor: EntityRef
    kind: str = INACTIVE_ANCESTOR

    def __str__(self) -> str:
        if self.kind == MISSING_PARENT:
            return f"{self.node} is active but its ancestor {self.ancestor} is missing"
        return f"{self.node} is active under archived {self.ancestor}"


def check(snapshot: Snapshot) -> list[Violation]:
    violations = []
    for ref in snapshot.order:
        if not snapshot.records[ref].is_active:
            continue
        for ancestor in snapshot.ancestors_of(ref):
            record = snapshot.get(ancestor)
            if record is None:
                violations.append(Violation(ref, ancestor, MISSING_PARENT))
                break
            if not record.is_active:
                violations.append(Violation(ref, ancestor))
                break
    return violations
