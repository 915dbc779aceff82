# src/task_spanner/core/store.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from ..tasks import task_tree
from ..tasks.task_models import (
    Forest,
    MoveDirection,
    TaskMode,
    TaskNode,
    TaskPatch,
    TaskStatus,
    TaskView,
    dumps_forest,
    loads_forest,
    now_utc,
)
from .errors import (
    InvalidOperationError,
    RemoteAppError,
    RemoteTransportError,
    SnapshotDecodeError,
    TaskNotFoundError,
    TaskStorageError,
)
from .ports import ForestObserver, TaskStorage

logger = logging.getLogger(__name__)


class Failure(StrEnum):
    NOT_FOUND = "not_found"
    BOUNDARY = "boundary"
    OUT_OF_RANGE = "out_of_range"
    INVALID = "invalid"
    TRANSPORT = "transport"
    REMOTE = "remote"
    STORAGE = "storage"
    MALFORMED = "malformed"


@dataclass(frozen=True, slots=True)
class OpResult:
    """Outcome of a TaskStore operation. Truthy on success."""

    ok: bool
    failure: Failure | None = None
    message: str = ""
    node: TaskNode | None = None
    text: str | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, *, node: TaskNode | None = None, text: str | None = None) -> OpResult:
        return cls(ok=True, node=node, text=text)

    @classmethod
    def fail(cls, failure: Failure, message: str) -> OpResult:
        return cls(ok=False, failure=failure, message=message)


def _classify(exc: TaskStorageError) -> Failure:
    if isinstance(exc, TaskNotFoundError):
        return Failure.NOT_FOUND
    if isinstance(exc, InvalidOperationError):
        return Failure.INVALID
    if isinstance(exc, SnapshotDecodeError):
        return Failure.MALFORMED
    if isinstance(exc, RemoteTransportError):
        return Failure.TRANSPORT
    if isinstance(exc, RemoteAppError):
        return Failure.REMOTE
    return Failure.STORAGE


class TaskStore:
    """
    Owns the in-memory forest and keeps it consistent with one TaskStorage.

    Write-through discipline:
    - the backend call goes first,
    - the matching task_tree operation is applied to the cache only after
      the backend confirmed it,
    - on failure the cache is left exactly as it was.

    All operations run under one asyncio.Lock held across the backend call
    and the local mutation, so mutations are applied one at a time in call
    order and observers only ever see complete states.
    """

    def __init__(self, storage: TaskStorage, *, mode: TaskMode | None = None) -> None:
        self._storage = storage
        self._mode = mode
        self._forest: Forest = ()
        self._observers: list[ForestObserver] = []
        self._lock = asyncio.Lock()

    # ---- accessors ----

    @property
    def storage(self) -> TaskStorage:
        return self._storage

    @property
    def mode(self) -> TaskMode | None:
        return self._mode

    @property
    def forest(self) -> Forest:
        """Current snapshot. Immutable; stale once a new notification arrives."""
        return self._forest

    def find(self, task_id: int) -> TaskNode | None:
        return task_tree.find_by_id(self._forest, task_id)

    def view(self, view: TaskView) -> Forest:
        return task_tree.filter_by_view(self._forest, view)

    # ---- observers ----

    def subscribe(self, observer: ForestObserver) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _commit(self, forest: Forest) -> None:
        self._forest = forest
        for observer in list(self._observers):
            try:
                observer(forest)
            except Exception:
                logger.exception("Forest observer %r failed", observer)

    def _failed(self, op: str, exc: TaskStorageError) -> OpResult:
        failure = _classify(exc)
        logger.warning("%s failed (%s): %s", op, failure.value, exc)
        return OpResult.fail(failure, str(exc))

    # ---- load / storage selection ----

    async def _load_locked(self, mode: TaskMode | None) -> OpResult:
        try:
            forest = await self._storage.load(mode)
        except TaskStorageError as e:
            return self._failed("load", e)
        self._mode = mode
        self._commit(task_tree.filter_by_mode(forest, mode))
        logger.info("Loaded %d tasks (mode=%s)", task_tree.count_nodes(self._forest), mode)
        return OpResult.success()

    async def load(self, mode: TaskMode | None = None) -> OpResult:
        """Replace the cache with the backend forest (filtered by mode)."""
        async with self._lock:
            return await self._load_locked(mode)

    async def reload(self) -> OpResult:
        async with self._lock:
            return await self._load_locked(self._mode)

    async def switch_storage(self, storage: TaskStorage) -> OpResult:
        """
        Swap the persistence adapter (settings action).

        The new adapter must load first; if it cannot, it is closed and the
        store stays on the previous adapter with the previous forest.
        """
        async with self._lock:
            if storage is self._storage:
                return await self._load_locked(self._mode)

            try:
                forest = await storage.load(self._mode)
            except TaskStorageError as e:
                await self._close_quietly(storage)
                return self._failed("switch_storage", e)

            old = self._storage
            self._storage = storage
            await self._close_quietly(old)
            self._commit(task_tree.filter_by_mode(forest, self._mode))
            logger.info("Switched storage; loaded %d tasks", task_tree.count_nodes(self._forest))
            return OpResult.success()

    @staticmethod
    async def _close_quietly(storage: TaskStorage) -> None:
        try:
            await storage.close()
        except Exception:
            logger.exception("Failed to close storage %r", storage)

    async def close(self) -> None:
        async with self._lock:
            await self._storage.close()

    # ---- mutations ----

    async def add_task(
        self,
        title: str,
        parent_id: int | None = None,
        mode: TaskMode | None = None,
    ) -> OpResult:
        """
        Create a task (root or sub-task).

        The id is computed against the unfiltered forest so that tasks hidden
        by the current mode never collide. The backend returns the canonical
        node, which is what goes into the cache.
        """
        if not title or not title.strip():
            return OpResult.fail(Failure.INVALID, "title is required")

        async with self._lock:
            try:
                full = await self._storage.load(None)
            except TaskStorageError as e:
                return self._failed("add_task", e)

            if parent_id is not None and task_tree.find_by_id(full, parent_id) is None:
                return OpResult.fail(Failure.NOT_FOUND, f"parent task {parent_id} not found")

            node = TaskNode(
                id=task_tree.next_id(full),
                title=title.strip(),
                start_time=now_utc(),
                parent_id=parent_id,
                mode=mode,
            )
            try:
                canonical = await self._storage.add(node)
            except TaskStorageError as e:
                return self._failed("add_task", e)

            if not task_tree.filter_by_mode((canonical,), self._mode):
                logger.debug("Task %s added but hidden by mode=%s", canonical.id, self._mode)
                return OpResult.success(node=canonical)

            edit = task_tree.insert_node(self._forest, canonical)
            if not edit.ok:
                logger.warning(
                    "Task %s added but parent %s is not visible; it will appear on reload",
                    canonical.id,
                    canonical.parent_id,
                )
                return OpResult.success(node=canonical)

            self._commit(edit.forest)
            logger.info("Task added id=%s parent=%s mode=%s", canonical.id, canonical.parent_id, canonical.mode)
            return OpResult.success(node=canonical)

    async def remove_task(self, task_id: int) -> OpResult:
        """Delete the task and its whole subtree."""
        async with self._lock:
            try:
                await self._storage.remove(task_id)
            except TaskStorageError as e:
                return self._failed("remove_task", e)
            edit = task_tree.remove_by_id(self._forest, task_id)
            if edit.ok:
                self._commit(edit.forest)
            logger.info("Task removed id=%s", task_id)
            return OpResult.success()

    async def _update(self, op: str, task_id: int, patch: TaskPatch) -> OpResult:
        try:
            await self._storage.update(task_id, patch)
        except TaskStorageError as e:
            return self._failed(op, e)
        edit = task_tree.patch_by_id(self._forest, task_id, patch)
        if edit.ok:
            self._commit(edit.forest)
        return OpResult.success(node=task_tree.find_by_id(self._forest, task_id))

    async def update_title(self, task_id: int, title: str) -> OpResult:
        if not title or not title.strip():
            return OpResult.fail(Failure.INVALID, "title is required")
        async with self._lock:
            return await self._update("update_title", task_id, TaskPatch(title=title.strip()))

    async def update_status(self, task_id: int, status: TaskStatus) -> OpResult:
        async with self._lock:
            current = task_tree.find_by_id(self._forest, task_id)
            if current is not None and not current.status.can_become(status):
                return OpResult.fail(
                    Failure.INVALID,
                    f"task {task_id} cannot go from {current.status.value} to {status.value}",
                )
            return await self._update("update_status", task_id, TaskPatch(status=status))

    async def update_mode(self, task_id: int, mode: TaskMode) -> OpResult:
        async with self._lock:
            result = await self._update("update_mode", task_id, TaskPatch(mode=mode))
            if result.ok:
                # the task may have left the current view
                self._commit(task_tree.filter_by_mode(self._forest, self._mode))
            return result

    async def toggle_done(self, task_id: int) -> OpResult:
        node = self.find(task_id)
        if node is None:
            return OpResult.fail(Failure.NOT_FOUND, f"task {task_id} not found")
        new = TaskStatus.CREATED if node.status is TaskStatus.DONE else TaskStatus.DONE
        return await self.update_status(task_id, new)

    async def archive(self, task_id: int) -> OpResult:
        return await self.update_status(task_id, TaskStatus.ARCHIVED)

    async def unarchive(self, task_id: int) -> OpResult:
        return await self.update_status(task_id, TaskStatus.CREATED)

    async def add_note(self, task_id: int, text: str) -> OpResult:
        async with self._lock:
            try:
                await self._storage.add_note(task_id, text)
            except TaskStorageError as e:
                return self._failed("add_note", e)
            edit = task_tree.add_note(self._forest, task_id, text)
            if edit.ok:
                self._commit(edit.forest)
            return OpResult.success(node=task_tree.find_by_id(self._forest, task_id))

    async def edit_note(self, task_id: int, index: int, text: str) -> OpResult:
        async with self._lock:
            current = task_tree.find_by_id(self._forest, task_id)
            if current is not None and not 0 <= index < len(current.notes):
                return OpResult.fail(
                    Failure.OUT_OF_RANGE,
                    f"note index {index} out of range for task {task_id} ({len(current.notes)} notes)",
                )
            try:
                await self._storage.update_note(task_id, index, text)
            except TaskStorageError as e:
                return self._failed("edit_note", e)
            edit = task_tree.edit_note(self._forest, task_id, index, text)
            if edit.ok:
                self._commit(edit.forest)
            return OpResult.success(node=task_tree.find_by_id(self._forest, task_id))

    async def move_task(self, task_id: int, direction: MoveDirection) -> OpResult:
        """
        Swap with the adjacent sibling, as seen in the current cached order.

        At the first/last position this is a no-op reported as BOUNDARY and
        the backend is not called.
        """
        async with self._lock:
            if task_tree.find_by_id(self._forest, task_id) is None:
                return OpResult.fail(Failure.NOT_FOUND, f"task {task_id} not found")

            other = task_tree.adjacent_sibling_id(self._forest, task_id, direction)
            if other is None:
                return OpResult.fail(Failure.BOUNDARY, f"task {task_id} cannot move {direction.value}")

            try:
                await self._storage.exchange_order(task_id, other)
            except TaskStorageError as e:
                return self._failed("move_task", e)

            edit = task_tree.move_sibling(self._forest, task_id, direction)
            if edit.ok:
                self._commit(edit.forest)
            logger.debug("Task %s moved %s (swapped with %s)", task_id, direction.value, other)
            return OpResult.success()

    # ---- import / export ----

    async def export_snapshot(self) -> OpResult:
        """Serialize the whole (unfiltered) forest as read from the backend."""
        async with self._lock:
            try:
                forest = await self._storage.load(None)
            except TaskStorageError as e:
                return self._failed("export_snapshot", e)
            return OpResult.success(text=dumps_forest(forest))

    async def import_snapshot(self, text: str | bytes) -> OpResult:
        """
        Replace everything with the given snapshot.

        Malformed input is rejected before anything is written.
        """
        try:
            forest = loads_forest(text)
        except SnapshotDecodeError as e:
            logger.warning("import_snapshot rejected: %s", e)
            return OpResult.fail(Failure.MALFORMED, str(e))

        ids = [n.id for n in task_tree.iter_nodes(forest)]
        if len(ids) != len(set(ids)):
            return OpResult.fail(Failure.MALFORMED, "snapshot contains duplicate task ids")

        async with self._lock:
            try:
                await self._storage.save(forest)
            except TaskStorageError as e:
                return self._failed("import_snapshot", e)
            self._commit(task_tree.filter_by_mode(forest, self._mode))
            logger.info("Imported %d tasks", len(ids))
            return OpResult.success()
