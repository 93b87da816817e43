"""
Archival engine for patient records.

Soft-deletes ("archives") and restores records across the patient ->
medical history -> consultation / prescription tree without ever leaving
an active record under an archived one.
"""

from .adapter import PersistenceAdapter, StorageError
from .checker import Violation, check
from .errors import (
    ArchivalError,
    InvariantViolation,
    NotFound,
    OperationFailed,
    PreconditionFailed,
)
from .graph import GRAPH, ArchivalGraph, Edge
from .locks import LockRegistry
from .memory import MemoryStore
from .results import AncestorRef, ArchiveResult, CommitResult, ProbeResult
from .service import ArchivalService
from .snapshot import Snapshot, load_subtree

__all__ = [
    "AncestorRef",
    "ArchivalError",
    "ArchivalGraph",
    "ArchivalService",
    "ArchiveResult",
    "CommitResult",
    "Edge",
    "GRAPH",
    "InvariantViolation",
    "LockRegistry",
    "MemoryStore",
    "NotFound",
    "OperationFailed",
    "PersistenceAdapter",
    "PreconditionFailed",
    "ProbeResult",
    "Snapshot",
    "StorageError",
    "Violation",
    "check",
    "load_subtree",
]
