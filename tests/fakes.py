# tests/fakes.py

from __future__ import annotations

from datetime import timedelta

from task_spanner.core.errors import TaskStorageError
from task_spanner.storage.snapshot_storage import SnapshotTaskStorage
from task_spanner.tasks.task_models import (
    REFERENCE_DATE,
    Forest,
    TaskMode,
    TaskNode,
    TaskPatch,
    TaskStatus,
    dumps_forest,
)


class FakeStorage(SnapshotTaskStorage):
    """
    In-memory TaskStorage used for store unit tests.

    - Keeps the snapshot as a JSON string (same codec as real adapters)
    - Records every public call for assertions
    - `fail` makes the next calls raise the given error without side effects
    """

    name = "fake"

    def __init__(self, forest: Forest = ()) -> None:
        super().__init__()
        self.raw: str | None = dumps_forest(forest) if forest else None
        self.calls: list[str] = []
        self.fail: TaskStorageError | None = None
        self.closed = False

    def _read_raw(self) -> str | None:
        return self.raw

    def _write_raw(self, text: str) -> None:
        self.raw = text

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if self.fail is not None:
            raise self.fail

    async def load(self, mode: TaskMode | None = None) -> Forest:
        self._check("load")
        return await super().load(mode)

    async def save(self, forest: Forest) -> None:
        self._check("save")
        await super().save(forest)

    async def add(self, node: TaskNode) -> TaskNode:
        self._check("add")
        return await super().add(node)

    async def update(self, task_id: int, patch: TaskPatch) -> None:
        self._check("update")
        await super().update(task_id, patch)

    async def remove(self, task_id: int) -> None:
        self._check("remove")
        await super().remove(task_id)

    async def exchange_order(self, a_id: int, b_id: int) -> None:
        self._check("exchange_order")
        await super().exchange_order(a_id, b_id)

    async def add_note(self, task_id: int, text: str) -> None:
        self._check("add_note")
        await super().add_note(task_id, text)

    async def update_note(self, task_id: int, index: int, text: str) -> None:
        self._check("update_note")
        await super().update_note(task_id, index, text)

    async def close(self) -> None:
        self.closed = True


class RecordingObserver:
    """Collects every forest the store publishes."""

    def __init__(self) -> None:
        self.seen: list[Forest] = []

    def __call__(self, forest: Forest) -> None:
        self.seen.append(forest)


def make_node(
    task_id: int,
    *children: TaskNode,
    title: str | None = None,
    parent_id: int | None = None,
    status: TaskStatus = TaskStatus.CREATED,
    notes: tuple[str, ...] = (),
    mode: TaskMode | None = None,
) -> TaskNode:
    """Small builder so tree literals in tests stay readable."""
    return TaskNode(
        id=task_id,
        title=title if title is not None else f"task {task_id}",
        start_time=REFERENCE_DATE + timedelta(seconds=task_id),
        parent_id=parent_id,
        status=status,
        notes=notes,
        mode=mode,
        children=children,
    )
