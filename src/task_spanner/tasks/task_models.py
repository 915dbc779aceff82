# src/task_spanner/tasks/task_models.py

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Any

from ..core.errors import SnapshotDecodeError

# Desktop client encodes dates as seconds since 2001-01-01 00:00:00 UTC.
REFERENCE_DATE = datetime(2001, 1, 1, tzinfo=timezone.utc)


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    created <-> done (toggle), created|done -> archived, archived -> created.
    """

    CREATED = "created"
    DONE = "done"
    ARCHIVED = "archived"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskStatus:
        if not raw or not isinstance(raw, str):
            return cls.CREATED
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.CREATED

    def can_become(self, new: TaskStatus) -> bool:
        if new is self:
            return True
        if self is TaskStatus.ARCHIVED:
            return new is TaskStatus.CREATED
        return True


class TaskMode(StrEnum):
    """Partition tag. Shared (or absent) tasks are visible under every mode."""

    WORK = "work"
    LIFE = "life"
    SHARED = "shared"

    @classmethod
    def from_raw(cls, raw: Any) -> TaskMode | None:
        if raw is None:
            return None
        s = str(raw).strip().lower()
        if s == "work":
            return cls.WORK
        if s == "life":
            return cls.LIFE
        return cls.SHARED

    def to_wire(self) -> str:
        return "" if self is TaskMode.SHARED else self.value


class MoveDirection(StrEnum):
    UP = "up"
    DOWN = "down"


class TaskView(StrEnum):
    UNFINISHED = "unfinished"
    ALL = "all"
    ARCHIVED = "archived"


@dataclass(frozen=True, slots=True)
class TaskNode:
    id: int
    title: str
    start_time: datetime
    parent_id: int | None = None
    status: TaskStatus = TaskStatus.CREATED
    notes: tuple[str, ...] = ()
    mode: TaskMode | None = None
    children: tuple[TaskNode, ...] = field(default=())

    @property
    def is_shared(self) -> bool:
        return self.mode is None or self.mode is TaskMode.SHARED


@dataclass(frozen=True, slots=True)
class TaskPatch:
    """Partial update. Fields left as None are not touched."""

    title: str | None = None
    status: TaskStatus | None = None
    notes: tuple[str, ...] | None = None
    mode: TaskMode | None = None

    def is_empty(self) -> bool:
        return self.title is None and self.status is None and self.notes is None and self.mode is None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.title is not None:
            out["title"] = self.title
        if self.status is not None:
            out["status"] = self.status.value
        if self.notes is not None:
            out["notes"] = list(self.notes)
        if self.mode is not None:
            out["mode"] = self.mode.to_wire()
        return out


Forest = tuple[TaskNode, ...]


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def _time_to_wire(ts: datetime) -> float:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return (ts - REFERENCE_DATE).total_seconds()


def _time_from_wire(raw: Any) -> datetime:
    if isinstance(raw, bool):
        raise SnapshotDecodeError(f"invalid startTime: {raw!r}")
    if isinstance(raw, (int, float)):
        return REFERENCE_DATE + timedelta(seconds=float(raw))
    if isinstance(raw, str) and raw.strip():
        try:
            ts = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError as e:
            raise SnapshotDecodeError(f"invalid startTime: {raw!r}") from e
        return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)
    if raw is None:
        return REFERENCE_DATE
    raise SnapshotDecodeError(f"invalid startTime: {raw!r}")


def node_to_dict(node: TaskNode) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": node.id,
        "title": node.title,
        "startTime": _time_to_wire(node.start_time),
    }
    if node.parent_id is not None:
        out["parentID"] = node.parent_id
    out["subTasks"] = [node_to_dict(c) for c in node.children]
    out["status"] = node.status.value
    out["notes"] = list(node.notes)
    if node.mode is not None:
        out["mode"] = node.mode.to_wire()
    return out


def node_from_dict(data: Any) -> TaskNode:
    """
    Decode one node (and its subtree).

    Legacy payloads may lack status/notes/mode/subTasks; those get defaults.
    id and title are mandatory.
    """
    if not isinstance(data, dict):
        raise SnapshotDecodeError(f"task must be an object, got {type(data).__name__}")

    raw_id = data.get("id")
    if isinstance(raw_id, bool) or not isinstance(raw_id, int):
        raise SnapshotDecodeError(f"task id must be an integer, got {raw_id!r}")
    title = data.get("title")
    if not isinstance(title, str):
        raise SnapshotDecodeError(f"task {raw_id} has no string title")

    raw_parent = data.get("parentID", data.get("parentId"))
    if raw_parent is not None and (isinstance(raw_parent, bool) or not isinstance(raw_parent, int)):
        raise SnapshotDecodeError(f"task {raw_id} has invalid parentID {raw_parent!r}")

    raw_children = data.get("subTasks")
    if raw_children is None:
        raw_children = []
    if not isinstance(raw_children, list):
        raise SnapshotDecodeError(f"task {raw_id} subTasks must be a list")

    raw_notes = data.get("notes")
    if raw_notes is None:
        raw_notes = []
    if not isinstance(raw_notes, list):
        raise SnapshotDecodeError(f"task {raw_id} notes must be a list")

    return TaskNode(
        id=raw_id,
        title=title,
        start_time=_time_from_wire(data.get("startTime")),
        parent_id=raw_parent or None,
        status=TaskStatus.from_raw(data.get("status")),
        notes=tuple(str(n) for n in raw_notes),
        mode=TaskMode.from_raw(data.get("mode")),
        children=tuple(node_from_dict(c) for c in raw_children),
    )


def forest_to_list(forest: Forest) -> list[dict[str, Any]]:
    return [node_to_dict(n) for n in forest]


def forest_from_list(data: Any) -> Forest:
    if not isinstance(data, list):
        raise SnapshotDecodeError(f"snapshot must be a JSON array, got {type(data).__name__}")
    return tuple(node_from_dict(item) for item in data)


def dumps_forest(forest: Forest) -> str:
    return json.dumps(forest_to_list(forest), ensure_ascii=False, indent=2)


def loads_forest(raw: str | bytes) -> Forest:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise SnapshotDecodeError(f"snapshot is not valid JSON: {e}") from e
    return forest_from_list(data)
