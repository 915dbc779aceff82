# tests/test_task_tree.py

from __future__ import annotations

from task_spanner.tasks import task_tree
from task_spanner.tasks.task_models import MoveDirection, TaskMode, TaskPatch, TaskStatus, TaskView

from .fakes import make_node


def _ids(forest) -> list[int]:
    return [n.id for n in forest]


def _sample():
    """
    1
    ├─ 2
    │  └─ 4
    └─ 3
    5
    """
    return (
        make_node(
            1,
            make_node(2, make_node(4, parent_id=2), parent_id=1),
            make_node(3, parent_id=1),
        ),
        make_node(5),
    )


def test_find_by_id_any_depth() -> None:
    forest = _sample()
    assert task_tree.find_by_id(forest, 4).parent_id == 2
    assert task_tree.find_by_id(forest, 99) is None


def test_next_id_scans_whole_forest() -> None:
    assert task_tree.next_id(()) == 1
    assert task_tree.next_id(_sample()) == 6


def test_insert_root_prepends() -> None:
    forest = task_tree.insert_root(_sample(), make_node(6))
    assert _ids(forest) == [6, 1, 5]


def test_insert_as_child_prepends_and_requires_parent() -> None:
    edit = task_tree.insert_as_child(_sample(), 2, make_node(6, parent_id=2))
    assert edit.ok
    assert _ids(task_tree.find_by_id(edit.forest, 2).children) == [6, 4]

    missing = task_tree.insert_as_child(_sample(), 42, make_node(6, parent_id=42))
    assert not missing.ok
    assert missing.forest == _sample()


def test_remove_cascades_to_descendants() -> None:
    forest = _sample()
    before = task_tree.count_nodes(forest)
    removed = 1 + task_tree.descendant_count(task_tree.find_by_id(forest, 1))

    edit = task_tree.remove_by_id(forest, 1)

    assert edit.ok
    assert task_tree.count_nodes(edit.forest) == before - removed == 1
    assert _ids(edit.forest) == [5]


def test_remove_missing_is_not_ok() -> None:
    edit = task_tree.remove_by_id(_sample(), 99)
    assert not edit.ok
    assert edit.forest == _sample()


def test_patch_by_id_does_not_mutate_input() -> None:
    forest = _sample()
    edit = task_tree.patch_by_id(forest, 4, TaskPatch(title="renamed", status=TaskStatus.DONE))

    assert edit.ok
    node = task_tree.find_by_id(edit.forest, 4)
    assert node.title == "renamed"
    assert node.status is TaskStatus.DONE
    assert task_tree.find_by_id(forest, 4).title == "task 4"


def test_move_sibling_swaps_and_refuses_at_boundary() -> None:
    forest = _sample()

    down = task_tree.move_sibling(forest, 2, MoveDirection.DOWN)
    assert down.ok
    assert _ids(task_tree.find_by_id(down.forest, 1).children) == [3, 2]

    first_up = task_tree.move_sibling(forest, 1, MoveDirection.UP)
    assert not first_up.ok
    assert first_up.forest == forest

    last_down = task_tree.move_sibling(forest, 5, MoveDirection.DOWN)
    assert not last_down.ok


def test_move_up_then_down_restores_order() -> None:
    forest = (make_node(1), make_node(2), make_node(3))
    up = task_tree.move_sibling(forest, 2, MoveDirection.UP)
    back = task_tree.move_sibling(up.forest, 2, MoveDirection.DOWN)
    assert back.forest == forest


def test_adjacent_sibling_id() -> None:
    forest = _sample()
    assert task_tree.adjacent_sibling_id(forest, 2, MoveDirection.DOWN) == 3
    assert task_tree.adjacent_sibling_id(forest, 2, MoveDirection.UP) is None
    assert task_tree.adjacent_sibling_id(forest, 5, MoveDirection.UP) == 1
    assert task_tree.adjacent_sibling_id(forest, 99, MoveDirection.UP) is None


def test_exchange_order_requires_siblings() -> None:
    forest = _sample()

    ok = task_tree.exchange_order(forest, 1, 5)
    assert ok.ok
    assert _ids(ok.forest) == [5, 1]

    refused = task_tree.exchange_order(forest, 2, 5)
    assert not refused.ok
    assert refused.forest == forest


def test_notes_append_and_edit() -> None:
    forest = (make_node(1, notes=("a", "b")),)

    added = task_tree.add_note(forest, 1, "c")
    assert task_tree.find_by_id(added.forest, 1).notes == ("a", "b", "c")

    edited = task_tree.edit_note(forest, 1, 0, "A")
    assert task_tree.find_by_id(edited.forest, 1).notes == ("A", "b")


def test_edit_note_out_of_range_leaves_notes() -> None:
    forest = (make_node(1, notes=("a", "b")),)
    edit = task_tree.edit_note(forest, 1, 5, "x")
    assert not edit.ok
    assert edit.forest == forest


def test_filter_by_mode_keeps_shared_and_promotes_visible_children() -> None:
    forest = (
        make_node(
            1,
            make_node(2, parent_id=1, mode=TaskMode.WORK),
            make_node(3, parent_id=1, mode=TaskMode.LIFE),
            mode=TaskMode.LIFE,
        ),
        make_node(4, mode=TaskMode.SHARED),
        make_node(5),
    )

    work = task_tree.filter_by_mode(forest, TaskMode.WORK)

    assert _ids(work) == [2, 4, 5]
    assert work[0].parent_id == 1
    assert task_tree.filter_by_mode(forest, None) == forest


def test_filter_by_mode_is_idempotent() -> None:
    forest = (
        make_node(1, make_node(2, parent_id=1, mode=TaskMode.LIFE), mode=TaskMode.WORK),
        make_node(3, make_node(4, parent_id=3, mode=TaskMode.WORK), mode=TaskMode.LIFE),
    )
    for mode in (TaskMode.WORK, TaskMode.LIFE):
        once = task_tree.filter_by_mode(forest, mode)
        assert task_tree.filter_by_mode(once, mode) == once


def test_filter_by_view() -> None:
    forest = (
        make_node(1, make_node(2, parent_id=1), status=TaskStatus.DONE),
        make_node(3, status=TaskStatus.DONE),
        make_node(4, make_node(5, parent_id=4, status=TaskStatus.ARCHIVED)),
        make_node(6, status=TaskStatus.ARCHIVED),
    )

    assert _ids(task_tree.filter_by_view(forest, TaskView.UNFINISHED)) == [1, 4]
    assert task_tree.filter_by_view(forest, TaskView.UNFINISHED)[1].children == ()
    assert _ids(task_tree.filter_by_view(forest, TaskView.ALL)) == [1, 3, 4]
    archived = task_tree.filter_by_view(forest, TaskView.ARCHIVED)
    assert _ids(archived) == [4, 6]
    assert _ids(archived[0].children) == [5]
