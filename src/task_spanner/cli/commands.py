# src/task_spanner/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from ..config import StorageType
from ..core.state import AppState
from ..core.store import Failure, OpResult
from ..tasks.task_models import Forest, MoveDirection, TaskMode, TaskStatus, TaskView
from .bootstrap import switch_storage

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)

_STATUS_MARK = {
    TaskStatus.CREATED: "[ ]",
    TaskStatus.DONE: "[x]",
    TaskStatus.ARCHIVED: "[a]",
}


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return await handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def render_forest(forest: Forest, depth: int = 0) -> list[str]:
    lines: list[str] = []
    for node in forest:
        mode = f" ({node.mode.value})" if node.mode is not None and node.mode is not TaskMode.SHARED else ""
        notes = f" [{len(node.notes)} notes]" if node.notes else ""
        lines.append(f"{'  ' * depth}{_STATUS_MARK[node.status]} #{node.id} {node.title}{mode}{notes}")
        lines.extend(render_forest(node.children, depth + 1))
    return lines


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw.lstrip("#"))
    except ValueError:
        return None


def _reply(result: OpResult, ok_text: str) -> str:
    if result.ok:
        return ok_text
    if result.failure is Failure.BOUNDARY:
        return f"Nothing to do: {result.message}"
    return f"Failed ({result.failure.value if result.failure else 'error'}): {result.message}"


def _parse_mode(raw: str) -> TaskMode | None:
    return None if raw.lower() in ("all", "none") else TaskMode.from_raw(raw)


# ---- commands ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.store
    describe = getattr(store.storage, "describe", None)
    backend = describe() if callable(describe) else type(store.storage).__name__
    mode = store.mode.value if store.mode is not None else "all"
    return (
        "Status:\n"
        f"  Storage: {backend}\n"
        f"  Mode: {mode}\n"
        f"  View: {state.view.value}\n"
        f"  Root tasks: {len(store.forest)}"
    )


async def cmd_ls(state: AppState, args: list[str]) -> str:
    """
    /ls              -> current view
    /ls all          -> all active tasks
    /ls unfinished   -> unfinished tasks
    /ls archived     -> archived tasks
    """
    if args:
        try:
            state.view = TaskView(args[0].lower())
        except ValueError:
            return "Usage: /ls [unfinished|all|archived]"
    lines = render_forest(state.store.view(state.view))
    return "\n".join(lines) if lines else f"No tasks ({state.view.value})."


async def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /add <title>"
    mode = state.store.mode
    result = await state.store.add_task(" ".join(args), mode=mode)
    return _reply(result, f"Added #{result.node.id}." if result.node else "Added.")


async def cmd_sub(state: AppState, args: list[str]) -> str:
    parent_id = _parse_id(args[0]) if args else None
    if parent_id is None or len(args) < 2:
        return "Usage: /sub <parent_id> <title>"
    result = await state.store.add_task(" ".join(args[1:]), parent_id=parent_id, mode=state.store.mode)
    return _reply(result, f"Added #{result.node.id} under #{parent_id}." if result.node else "Added.")


async def cmd_rename(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None or len(args) < 2:
        return "Usage: /rename <id> <title>"
    return _reply(await state.store.update_title(task_id, " ".join(args[1:])), f"Renamed #{task_id}.")


def _id_command(action: str, op: Callable[[AppState, int], Awaitable[OpResult]]) -> CommandHandler:
    async def handler(state: AppState, args: list[str]) -> str:
        task_id = _parse_id(args[0]) if args else None
        if task_id is None:
            return f"Usage: /{action} <id>"
        return _reply(await op(state, task_id), f"OK: {action} #{task_id}.")

    return handler


async def cmd_note(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None or len(args) < 2:
        return "Usage: /note <id> <text>"
    return _reply(await state.store.add_note(task_id, " ".join(args[1:])), f"Note added to #{task_id}.")


async def cmd_editnote(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    index = _parse_id(args[1]) if len(args) > 1 else None
    if task_id is None or index is None or len(args) < 3:
        return "Usage: /editnote <id> <index> <text>"
    result = await state.store.edit_note(task_id, index, " ".join(args[2:]))
    return _reply(result, f"Note {index} of #{task_id} updated.")


async def cmd_setmode(state: AppState, args: list[str]) -> str:
    task_id = _parse_id(args[0]) if args else None
    if task_id is None or len(args) < 2:
        return "Usage: /setmode <id> work|life|shared"
    mode = TaskMode.from_raw(args[1])
    return _reply(await state.store.update_mode(task_id, mode), f"#{task_id} is now {mode.value}.")


async def cmd_mode(state: AppState, args: list[str]) -> str:
    """
    /mode            -> show current mode
    /mode work|life  -> reload showing that mode (+ shared tasks)
    /mode all        -> reload without filtering
    """
    if not args:
        current = state.store.mode
        return f"Mode: {current.value if current is not None else 'all'}"
    mode = _parse_mode(args[0])
    result = await state.store.load(mode)
    return _reply(result, f"Mode switched to {mode.value if mode is not None else 'all'}.")


async def cmd_storage(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /storage kv|file|remote"
    try:
        kind = StorageType(args[0].lower())
    except ValueError:
        return "Usage: /storage kv|file|remote"
    ok = await switch_storage(state, kind)
    return f"Storage switched to {kind.value}." if ok else f"Could not switch to {kind.value}; still using the previous storage."


async def cmd_export(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /export <path>"
    result = await state.store.export_snapshot()
    if not result.ok or result.text is None:
        return _reply(result, "")
    path = Path(args[0]).expanduser()
    try:
        path.write_text(result.text, "utf-8")
    except OSError as e:
        logger.exception("Export to %s failed", path)
        return f"Export failed: {e}"
    return f"Exported to {path}."


async def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /import <path>"
    path = Path(args[0]).expanduser()
    try:
        text = path.read_text("utf-8")
    except OSError as e:
        return f"Import failed: {e}"
    return _reply(await state.store.import_snapshot(text), f"Imported from {path}.")


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show storage / mode / view.")
registry.register("ls", cmd_ls, help_text="List tasks: /ls [unfinished|all|archived].", aliases=["list"])
registry.register("add", cmd_add, help_text="Add a root task: /add <title>.")
registry.register("sub", cmd_sub, help_text="Add a sub-task: /sub <parent_id> <title>.")
registry.register("rename", cmd_rename, help_text="Rename a task: /rename <id> <title>.")
registry.register(
    "done",
    _id_command("done", lambda s, i: s.store.toggle_done(i)),
    help_text="Toggle done: /done <id>.",
)
registry.register(
    "undo",
    _id_command("undo", lambda s, i: s.store.update_status(i, TaskStatus.CREATED)),
    help_text="Mark a task as not done: /undo <id>.",
)
registry.register(
    "archive",
    _id_command("archive", lambda s, i: s.store.archive(i)),
    help_text="Archive a task: /archive <id>.",
)
registry.register(
    "unarchive",
    _id_command("unarchive", lambda s, i: s.store.unarchive(i)),
    help_text="Bring an archived task back: /unarchive <id>.",
)
registry.register(
    "rm",
    _id_command("rm", lambda s, i: s.store.remove_task(i)),
    help_text="Delete a task and its sub-tasks: /rm <id>.",
)
registry.register(
    "up",
    _id_command("up", lambda s, i: s.store.move_task(i, MoveDirection.UP)),
    help_text="Move a task up: /up <id>.",
)
registry.register(
    "down",
    _id_command("down", lambda s, i: s.store.move_task(i, MoveDirection.DOWN)),
    help_text="Move a task down: /down <id>.",
)
registry.register("note", cmd_note, help_text="Add a note: /note <id> <text>.")
registry.register("editnote", cmd_editnote, help_text="Edit a note: /editnote <id> <index> <text>.")
registry.register("setmode", cmd_setmode, help_text="Tag a task: /setmode <id> work|life|shared.")
registry.register("mode", cmd_mode, help_text="Switch visible mode: /mode work|life|all.")
registry.register("storage", cmd_storage, help_text="Switch backend: /storage kv|file|remote.")
registry.register("export", cmd_export, help_text="Export all tasks as JSON: /export <path>.")
registry.register("import", cmd_import, help_text="Replace all tasks from JSON: /import <path>.")
