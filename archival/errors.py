"""
Error types raised by the archival engine.

- ArchivalError: Base exception
- NotFound: Target record does not exist
- PreconditionFailed: Restore without cascade under an archived ancestor
- OperationFailed: Storage or lock failure, safe to retry verbatim
- InvariantViolation: Checker found an active record under an archived one

Invariants:
    - All errors inherit from ArchivalError
    - Every error raised after a write reports how many rows changed
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from domain import EntityRef

if TYPE_CHECKING:
    from .checker import Violation
    from .results import AncestorRef


class ArchivalError(Exception):
    """Base exception for all archival errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
        retryable: Whether repeating the identical call is safe and useful
    """

    retryable = False

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "ARCHIVAL_ERROR"
        self.details = details or {}


class NotFound(ArchivalError):
    """Target (or one of its ancestors) does not exist."""

    def __init__(self, ref: EntityRef) -> None:
        super().__init__(
            f"{ref.type.value} {ref.id} not found",
            code="NOT_FOUND",
            details={"type": ref.type.value, "id": ref.id},
        )
        self.ref = ref


class PreconditionFailed(ArchivalError):
    """Restoring the target alone would leave it under an archived ancestor.

    The caller must probe again or resubmit with ``cascade=True``.
    """

    def __init__(self, target: EntityRef, ancestor: AncestorRef) -> None:
        super().__init__(
            f"cannot restore {target} while {ancestor.type.value} {ancestor.id} is archived",
            code="PRECONDITION_FAILED",
            details={"target": str(target), "ancestor": str(ancestor.ref)},
        )
        self.target = target
        self.ancestor = ancestor


class OperationFailed(ArchivalError):
    """Storage failure part-way through an operation.

    Every write is an absolute status set, so the identical call can be
    retried to converge. ``changed_count`` tells the caller how far the
    failed attempt got.
    """

    retryable = True

    def __init__(self, message: str, changed_count: int = 0, target: EntityRef | None = None) -> None:
        super().__init__(
            message,
            code="OPERATION_FAILED",
            details={"changed_count": changed_count, "target": str(target) if target else None},
        )
        self.changed_count = changed_count
        self.target = target


class InvariantViolation(ArchivalError):
    """An operation that should have left the subtree consistent did not."""

    def __init__(self, violations: list[Violation], changed_count: int = 0) -> None:
        super().__init__(
            f"{len(violations)} consistency violation(s) after restore",
            code="INVARIANT_VIOLATION",
            details={"violations": [str(v) for v in violations], "changed_count": changed_count},
        )
        self.violations = violations
        self.changed_count = changed_count
