"""Exceptions raised by the scheduling core.

Scheduling conflicts are not exceptions: they come back as result values
(see :class:`scheduling_server.scheduler.BatchOutcome`).
"""
from __future__ import annotations


class SchedulingError(Exception):
    """Base class for every recoverable failure of the scheduling core."""


class ValidationError(SchedulingError, ValueError):
    """Raised when a record or request fails a precondition. Nothing was changed."""


class RecordNotFoundError(SchedulingError, KeyError):
    """Raised when an id does not resolve in its collection."""

    def __init__(self, kind: str, record_id: int) -> None:
        super().__init__(f"No record with id {record_id} in {kind}.")
        self.kind = kind
        self.record_id = record_id

    def __str__(self) -> str:
        return self.args[0]


class ReferenceInUseError(SchedulingError):
    """Raised when deleting a workshop, educator or class that sessions still reference."""

    def __init__(self, kind: str, record_id: int, session_count: int) -> None:
        super().__init__(
            f"Cannot delete record {record_id} from {kind}: "
            f"{session_count} session(s) still reference it."
        )
        self.kind = kind
        self.record_id = record_id
        self.session_count = session_count


class DocumentError(SchedulingError):
    """Raised when an imported document does not have the expected structure."""


class PersistenceError(SchedulingError):
    """Raised by a storage backend that could not load or save the state."""
