# src/task_spanner/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- builds the selected storage adapter and the one TaskStore,
- wires them into AppState.
"""

from __future__ import annotations

import logging

from ..config import Settings, StorageType, get_settings
from ..core.ports import TaskStorage
from ..core.state import AppState
from ..core.store import TaskStore
from ..storage.factory import create_storage

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.kv_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.tasks_file_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings: Settings | None = None, storage: TaskStorage | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and storage injectable makes the app easier to test and
    avoids hidden global config reads. If settings is None, falls back to
    get_settings(); if storage is None, it is built from settings.storage_type.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if storage is None:
        storage = create_storage(settings)

    store = TaskStore(storage, mode=settings.default_mode)
    return AppState(settings=settings, store=store)


async def start_state(state: AppState) -> None:
    """Initial load; a failure is logged and the app starts with an empty forest."""
    result = await state.store.load(state.settings.default_mode)
    if not result:
        logger.warning("Initial load failed: %s", result.message)


async def switch_storage(state: AppState, storage_type: StorageType) -> bool:
    """Settings action: move the store onto another backend."""
    storage = create_storage(state.settings, storage_type)
    result = await state.store.switch_storage(storage)
    return result.ok
