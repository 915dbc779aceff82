# src/task_spanner/core/errors.py

"""
Storage error taxonomy.

Adapters raise these; TaskStore converts them into failed OpResults so that
callers never see a storage exception.
"""

from __future__ import annotations


class TaskStorageError(Exception):
    """Base class for every persistence failure."""


class TaskNotFoundError(TaskStorageError):
    """Task (or parent task) id does not exist in the stored forest."""


class InvalidOperationError(TaskStorageError):
    """Structural refusal: note index out of range, ids not siblings, ..."""


class SnapshotDecodeError(TaskStorageError, ValueError):
    """Persisted or imported payload is not a valid forest snapshot."""


class RemoteTransportError(TaskStorageError):
    """Non-2xx HTTP status, connection failure or timeout."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteAppError(TaskStorageError):
    """Remote envelope carried a non-zero code."""

    def __init__(self, code: int, msg: str | None) -> None:
        super().__init__(msg or f"remote error code={code}")
        self.code = code
        self.msg = msg
