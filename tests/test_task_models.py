# tests/test_task_models.py

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from task_spanner.core.errors import SnapshotDecodeError
from task_spanner.tasks.task_models import (
    REFERENCE_DATE,
    TaskMode,
    TaskPatch,
    TaskStatus,
    dumps_forest,
    loads_forest,
    node_from_dict,
    node_to_dict,
)

from .fakes import make_node


def test_node_to_dict_uses_wire_keys() -> None:
    child = make_node(2, parent_id=1, notes=("n1",), mode=TaskMode.WORK)
    root = make_node(1, child, title="Root", status=TaskStatus.DONE, mode=TaskMode.SHARED)

    data = node_to_dict(root)

    assert data["id"] == 1
    assert data["title"] == "Root"
    assert data["startTime"] == 1.0
    assert "parentID" not in data
    assert data["status"] == "done"
    assert data["notes"] == []
    assert data["mode"] == ""
    assert data["subTasks"][0]["parentID"] == 1
    assert data["subTasks"][0]["mode"] == "work"
    assert data["subTasks"][0]["notes"] == ["n1"]


def test_absent_mode_is_not_written() -> None:
    assert "mode" not in node_to_dict(make_node(1))


def test_legacy_payload_gets_defaults() -> None:
    node = node_from_dict({"id": 3, "title": "old", "startTime": 0})

    assert node.status is TaskStatus.CREATED
    assert node.notes == ()
    assert node.mode is None
    assert node.children == ()
    assert node.parent_id is None
    assert node.start_time == REFERENCE_DATE


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("", TaskMode.SHARED),
        ("shared", TaskMode.SHARED),
        ("work", TaskMode.WORK),
        ("LIFE", TaskMode.LIFE),
        (None, None),
    ],
)
def test_mode_decoding(raw, expected) -> None:
    node = node_from_dict({"id": 1, "title": "t", "startTime": 0, "mode": raw})
    assert node.mode is expected


def test_parent_id_zero_and_alias() -> None:
    assert node_from_dict({"id": 1, "title": "t", "parentID": 0}).parent_id is None
    assert node_from_dict({"id": 2, "title": "t", "parentId": 1}).parent_id == 1


def test_start_time_accepts_iso_strings() -> None:
    node = node_from_dict({"id": 1, "title": "t", "startTime": "2024-05-01T10:00:00Z"})
    assert node.start_time == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def test_unknown_status_falls_back_to_created() -> None:
    node = node_from_dict({"id": 1, "title": "t", "status": "weird"})
    assert node.status is TaskStatus.CREATED


def test_snapshot_text_round_trip() -> None:
    forest = (
        make_node(1, make_node(2, parent_id=1, notes=("a", "b"))),
        make_node(3, mode=TaskMode.LIFE, status=TaskStatus.ARCHIVED),
    )
    text = dumps_forest(forest)

    assert isinstance(json.loads(text), list)
    assert loads_forest(text) == forest


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        '{"id": 1}',
        '[{"title": "no id"}]',
        '[{"id": true, "title": "bool id"}]',
        '[{"id": 1}]',
        '[{"id": 1, "title": "t", "subTasks": {}}]',
        '[{"id": 1, "title": "t", "notes": "x"}]',
        '[{"id": 1, "title": "t", "notes": {}}]',
        '[{"id": 1, "title": "t", "notes": 0}]',
        '[{"id": 1, "title": "t", "subTasks": ""}]',
        '[{"id": 1, "title": "t", "startTime": "yesterday"}]',
    ],
)
def test_malformed_snapshots_are_rejected(raw: str) -> None:
    with pytest.raises(SnapshotDecodeError):
        loads_forest(raw)


def test_status_transitions() -> None:
    assert TaskStatus.CREATED.can_become(TaskStatus.DONE)
    assert TaskStatus.DONE.can_become(TaskStatus.CREATED)
    assert TaskStatus.DONE.can_become(TaskStatus.ARCHIVED)
    assert TaskStatus.ARCHIVED.can_become(TaskStatus.CREATED)
    assert not TaskStatus.ARCHIVED.can_become(TaskStatus.DONE)


def test_patch_to_dict_only_carries_set_fields() -> None:
    patch = TaskPatch(title="x", mode=TaskMode.SHARED)
    assert patch.to_dict() == {"title": "x", "mode": ""}
    assert TaskPatch().is_empty()
    assert not patch.is_empty()
