# src/task_spanner/tasks/task_tree.py

from __future__ import annotations

"""
Pure tree algorithms over an immutable Forest.

Every mutating operation is expressed through rewrite_siblings():
- walk depth-first,
- check the whole sibling level before descending into children,
- hand the matching sibling tuple + index to an edit callback,
- rebuild only the path from the root to the edited level.

Functions never mutate their input; they return (new_forest, ok).
Ids are unique across the forest, so the first match is the only match.
"""

from collections.abc import Callable, Iterator
from dataclasses import replace
from typing import NamedTuple

from .task_models import Forest, MoveDirection, TaskMode, TaskNode, TaskPatch, TaskStatus, TaskView

Match = Callable[[TaskNode], bool]
# edit(siblings, index) -> new siblings, or None to refuse the edit.
Edit = Callable[[Forest, int], "Forest | None"]


class TreeEdit(NamedTuple):
    forest: Forest
    ok: bool


class _Outcome:
    MISSING = 0
    APPLIED = 1
    REFUSED = 2


def _rewrite(siblings: Forest, match: Match, edit: Edit) -> tuple[Forest, int]:
    for i, node in enumerate(siblings):
        if match(node):
            edited = edit(siblings, i)
            if edited is None:
                return siblings, _Outcome.REFUSED
            return edited, _Outcome.APPLIED

    for i, node in enumerate(siblings):
        if not node.children:
            continue
        children, outcome = _rewrite(node.children, match, edit)
        if outcome == _Outcome.MISSING:
            continue
        if outcome == _Outcome.REFUSED:
            return siblings, outcome
        rebuilt = replace(node, children=children)
        return siblings[:i] + (rebuilt,) + siblings[i + 1 :], outcome

    return siblings, _Outcome.MISSING


def rewrite_siblings(forest: Forest, match: Match, edit: Edit) -> TreeEdit:
    """Generic walk used by every mutating operation below."""
    new_forest, outcome = _rewrite(tuple(forest), match, edit)
    return TreeEdit(new_forest, outcome == _Outcome.APPLIED)


def _by_id(task_id: int) -> Match:
    return lambda node: node.id == task_id


def _replace_at(siblings: Forest, index: int, node: TaskNode) -> Forest:
    return siblings[:index] + (node,) + siblings[index + 1 :]


# ---- read-only helpers ----


def iter_nodes(forest: Forest) -> Iterator[TaskNode]:
    for node in forest:
        yield node
        yield from iter_nodes(node.children)


def find_by_id(forest: Forest, task_id: int) -> TaskNode | None:
    for node in forest:
        if node.id == task_id:
            return node
    for node in forest:
        found = find_by_id(node.children, task_id)
        if found is not None:
            return found
    return None


def count_nodes(forest: Forest) -> int:
    return sum(1 for _ in iter_nodes(forest))


def descendant_count(node: TaskNode) -> int:
    return count_nodes(node.children)


def max_id(forest: Forest) -> int:
    return max((n.id for n in iter_nodes(forest)), default=0)


def next_id(forest: Forest) -> int:
    """Id for a new task: 1 + max id over the whole (unfiltered) forest."""
    return max_id(forest) + 1


def sibling_ids(forest: Forest, task_id: int) -> tuple[int, ...] | None:
    """Ids of the sibling level containing task_id (itself included)."""
    for node in forest:
        if node.id == task_id:
            return tuple(n.id for n in forest)
    for node in forest:
        ids = sibling_ids(node.children, task_id)
        if ids is not None:
            return ids
    return None


def adjacent_sibling_id(forest: Forest, task_id: int, direction: MoveDirection) -> int | None:
    ids = sibling_ids(forest, task_id)
    if ids is None:
        return None
    i = ids.index(task_id)
    j = i - 1 if direction is MoveDirection.UP else i + 1
    if j < 0 or j >= len(ids):
        return None
    return ids[j]


# ---- mutations ----


def insert_root(forest: Forest, node: TaskNode) -> Forest:
    """New root tasks go first."""
    return (node,) + tuple(forest)


def insert_as_child(forest: Forest, parent_id: int, node: TaskNode) -> TreeEdit:
    """
    Prepend node to the children of parent_id.

    Fails (no root fallback) when the parent does not exist.
    """

    def edit(siblings: Forest, i: int) -> Forest:
        parent = siblings[i]
        return _replace_at(siblings, i, replace(parent, children=(node,) + parent.children))

    return rewrite_siblings(forest, _by_id(parent_id), edit)


def insert_node(forest: Forest, node: TaskNode) -> TreeEdit:
    if node.parent_id is None:
        return TreeEdit(insert_root(forest, node), True)
    return insert_as_child(forest, node.parent_id, node)


def remove_by_id(forest: Forest, task_id: int) -> TreeEdit:
    """Drop the node together with its whole subtree."""
    return rewrite_siblings(forest, _by_id(task_id), lambda s, i: s[:i] + s[i + 1 :])


def patch_node(node: TaskNode, patch: TaskPatch) -> TaskNode:
    changes: dict = {}
    if patch.title is not None:
        changes["title"] = patch.title
    if patch.status is not None:
        changes["status"] = patch.status
    if patch.notes is not None:
        changes["notes"] = tuple(patch.notes)
    if patch.mode is not None:
        changes["mode"] = patch.mode
    return replace(node, **changes) if changes else node


def patch_by_id(forest: Forest, task_id: int, patch: TaskPatch) -> TreeEdit:
    return rewrite_siblings(
        forest,
        _by_id(task_id),
        lambda s, i: _replace_at(s, i, patch_node(s[i], patch)),
    )


def move_sibling(forest: Forest, task_id: int, direction: MoveDirection) -> TreeEdit:
    """
    Swap with the previous (up) or next (down) sibling under the same parent.

    ok is False both when the id is missing and at a boundary; use
    adjacent_sibling_id() first to tell the two apart.
    """

    def edit(siblings: Forest, i: int) -> Forest | None:
        j = i - 1 if direction is MoveDirection.UP else i + 1
        if j < 0 or j >= len(siblings):
            return None
        items = list(siblings)
        items[i], items[j] = items[j], items[i]
        return tuple(items)

    return rewrite_siblings(forest, _by_id(task_id), edit)


def exchange_order(forest: Forest, a_id: int, b_id: int) -> TreeEdit:
    """Swap two tasks that share a parent. Refused when they are not siblings."""
    if a_id == b_id:
        return TreeEdit(tuple(forest), find_by_id(forest, a_id) is not None)

    def edit(siblings: Forest, i: int) -> Forest | None:
        j = next((k for k, n in enumerate(siblings) if n.id == b_id), None)
        if j is None:
            return None
        items = list(siblings)
        items[i], items[j] = items[j], items[i]
        return tuple(items)

    return rewrite_siblings(forest, _by_id(a_id), edit)


def add_note(forest: Forest, task_id: int, text: str) -> TreeEdit:
    return rewrite_siblings(
        forest,
        _by_id(task_id),
        lambda s, i: _replace_at(s, i, replace(s[i], notes=s[i].notes + (text,))),
    )


def edit_note(forest: Forest, task_id: int, index: int, text: str) -> TreeEdit:
    """Replace notes[index]; refused when index is out of range."""

    def edit(siblings: Forest, i: int) -> Forest | None:
        node = siblings[i]
        if index < 0 or index >= len(node.notes):
            return None
        notes = node.notes[:index] + (text,) + node.notes[index + 1 :]
        return _replace_at(siblings, i, replace(node, notes=notes))

    return rewrite_siblings(forest, _by_id(task_id), edit)


# ---- views ----


def filter_by_mode(forest: Forest, mode: TaskMode | None) -> Forest:
    """
    Keep nodes whose mode equals `mode`, is absent, or is shared.

    Children are judged independently of their parent: the visible
    descendants of a hidden node take its place in the sibling list, so a
    visible task may end up with no visible ancestor (parent_id untouched).
    None/shared means no filtering.

    Local backends apply this filter themselves. The remote server filters
    on its side and drops a hidden node with its whole subtree, so the same
    data can load with fewer tasks from "remote" than from "kv" or "file".
    A promoted task is not a real sibling of its new neighbours: moving it
    there is refused by the backend as an invalid operation.
    """
    if mode is None or mode is TaskMode.SHARED:
        return tuple(forest)
    out: list[TaskNode] = []
    for node in forest:
        children = filter_by_mode(node.children, mode)
        if node.is_shared or node.mode is mode:
            out.append(replace(node, children=children))
        else:
            out.extend(children)
    return tuple(out)


def _has_status(node: TaskNode, status: TaskStatus) -> bool:
    return node.status is status or any(_has_status(c, status) for c in node.children)


def _is_unfinished(node: TaskNode) -> bool:
    if node.status is TaskStatus.ARCHIVED:
        return False
    return node.status is TaskStatus.CREATED or any(_is_unfinished(c) for c in node.children)


def filter_by_view(forest: Forest, view: TaskView) -> Forest:
    if view is TaskView.ALL:
        keep: Match = lambda n: n.status is not TaskStatus.ARCHIVED
    elif view is TaskView.UNFINISHED:
        keep = _is_unfinished
    else:
        keep = lambda n: _has_status(n, TaskStatus.ARCHIVED)
    return tuple(
        replace(node, children=filter_by_view(node.children, view))
        for node in forest
        if keep(node)
    )
