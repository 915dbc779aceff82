# src/task_spanner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

TaskStore depends on the TaskStorage Protocol instead of a concrete backend.
This keeps key-value / file / remote persistence swappable and makes testing easier.
"""

from collections.abc import Callable
from typing import Protocol

from ..tasks.task_models import Forest, TaskMode, TaskNode, TaskPatch

ForestObserver = Callable[[Forest], None]


class TaskStorage(Protocol):
    """
    Persistence adapter contract.

    Each call either fully succeeds or raises a TaskStorageError without
    partial effect. Whether the backend round-trips the whole forest or
    mutates server-side is an implementation detail.
    """

    async def load(self, mode: TaskMode | None = None) -> Forest: ...

    async def save(self, forest: Forest) -> None: ...

    async def add(self, node: TaskNode) -> TaskNode: ...

    async def update(self, task_id: int, patch: TaskPatch) -> None: ...

    async def remove(self, task_id: int) -> None: ...

    async def exchange_order(self, a_id: int, b_id: int) -> None: ...

    async def add_note(self, task_id: int, text: str) -> None: ...

    async def update_note(self, task_id: int, index: int, text: str) -> None: ...

    async def close(self) -> None: ...
