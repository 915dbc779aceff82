# src/task_spanner/storage/snapshot_storage.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import replace

from ..core.errors import InvalidOperationError, SnapshotDecodeError, TaskNotFoundError, TaskStorageError
from ..tasks import task_tree
from ..tasks.task_models import Forest, TaskMode, TaskNode, TaskPatch, dumps_forest, loads_forest

logger = logging.getLogger(__name__)


class SnapshotTaskStorage:
    """
    Whole-snapshot persistence.

    Every mutation is: load the entire forest -> apply a task_tree operation
    -> save the entire forest. Subclasses only provide raw text I/O:

    - _read_raw() -> str | None   (None means "nothing stored yet")
    - _write_raw(text) -> None

    Both are blocking and run in a worker thread. A read-modify-write cycle
    holds an asyncio.Lock so two mutations never interleave on one adapter.
    """

    name = "snapshot"
    io_errors: tuple[type[BaseException], ...] = (OSError,)

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    # ---- raw I/O (subclasses) ----

    def _read_raw(self) -> str | None:
        raise NotImplementedError

    def _write_raw(self, text: str) -> None:
        raise NotImplementedError

    def describe(self) -> str:
        return self.name

    # ---- low-level helpers ----

    async def _load_all(self) -> Forest:
        try:
            raw = await asyncio.to_thread(self._read_raw)
        except UnicodeDecodeError:
            logger.exception("%s: stored snapshot is not valid UTF-8; treating as empty", self.describe())
            return ()
        except self.io_errors as e:
            raise TaskStorageError(f"{self.describe()}: read failed: {e}") from e

        if raw is None:
            logger.debug("%s: no saved snapshot, starting empty", self.describe())
            return ()

        try:
            forest = loads_forest(raw)
        except SnapshotDecodeError:
            logger.exception("%s: stored snapshot is malformed; treating as empty", self.describe())
            return ()

        logger.debug("%s: loaded %d root tasks", self.describe(), len(forest))
        return forest

    async def _save_all(self, forest: Forest) -> None:
        text = dumps_forest(forest)
        try:
            await asyncio.to_thread(self._write_raw, text)
        except self.io_errors as e:
            raise TaskStorageError(f"{self.describe()}: write failed: {e}") from e
        logger.debug("%s: saved %d root tasks", self.describe(), len(forest))

    async def _mutate(self, apply: Callable[[Forest], Forest]) -> None:
        async with self._lock:
            forest = await self._load_all()
            new_forest = apply(forest)
            await self._save_all(new_forest)

    @staticmethod
    def _require(forest: Forest, task_id: int) -> TaskNode:
        node = task_tree.find_by_id(forest, task_id)
        if node is None:
            raise TaskNotFoundError(f"task {task_id} not found")
        return node

    # ---- TaskStorage ----

    async def load(self, mode: TaskMode | None = None) -> Forest:
        async with self._lock:
            forest = await self._load_all()
        return task_tree.filter_by_mode(forest, mode)

    async def save(self, forest: Forest) -> None:
        async with self._lock:
            await self._save_all(tuple(forest))

    async def add(self, node: TaskNode) -> TaskNode:
        async with self._lock:
            forest = await self._load_all()
            canonical = replace(node, id=task_tree.next_id(forest), children=())
            edit = task_tree.insert_node(forest, canonical)
            if not edit.ok:
                raise TaskNotFoundError(f"parent task {node.parent_id} not found")
            await self._save_all(edit.forest)
        logger.debug("%s: added task id=%s parent=%s", self.describe(), canonical.id, canonical.parent_id)
        return canonical

    async def update(self, task_id: int, patch: TaskPatch) -> None:
        def apply(forest: Forest) -> Forest:
            edit = task_tree.patch_by_id(forest, task_id, patch)
            if not edit.ok:
                raise TaskNotFoundError(f"task {task_id} not found")
            return edit.forest

        await self._mutate(apply)

    async def remove(self, task_id: int) -> None:
        def apply(forest: Forest) -> Forest:
            edit = task_tree.remove_by_id(forest, task_id)
            if not edit.ok:
                raise TaskNotFoundError(f"task {task_id} not found")
            return edit.forest

        await self._mutate(apply)

    async def exchange_order(self, a_id: int, b_id: int) -> None:
        def apply(forest: Forest) -> Forest:
            self._require(forest, a_id)
            self._require(forest, b_id)
            edit = task_tree.exchange_order(forest, a_id, b_id)
            if not edit.ok:
                raise InvalidOperationError(f"tasks {a_id} and {b_id} are not at the same level")
            return edit.forest

        await self._mutate(apply)

    async def add_note(self, task_id: int, text: str) -> None:
        def apply(forest: Forest) -> Forest:
            edit = task_tree.add_note(forest, task_id, text)
            if not edit.ok:
                raise TaskNotFoundError(f"task {task_id} not found")
            return edit.forest

        await self._mutate(apply)

    async def update_note(self, task_id: int, index: int, text: str) -> None:
        def apply(forest: Forest) -> Forest:
            node = self._require(forest, task_id)
            edit = task_tree.edit_note(forest, task_id, index, text)
            if not edit.ok:
                raise InvalidOperationError(
                    f"note index {index} out of range for task {task_id} ({len(node.notes)} notes)"
                )
            return edit.forest

        await self._mutate(apply)

    async def close(self) -> None:
        return
