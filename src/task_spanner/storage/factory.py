# src/task_spanner/storage/factory.py

from __future__ import annotations

import logging

from ..config import Settings, StorageType
from ..core.ports import TaskStorage
from .file_storage import FileTaskStorage
from .kv_storage import KeyValueTaskStorage
from .remote_storage import RemoteTaskStorage

logger = logging.getLogger(__name__)


def create_storage(settings: Settings, storage_type: StorageType | None = None) -> TaskStorage:
    """Build the persistence adapter selected by settings (or an explicit override)."""
    kind = storage_type or settings.storage_type
    logger.info("Using %s task storage", kind.value)

    if kind is StorageType.KV:
        return KeyValueTaskStorage(settings.kv_db_path)
    if kind is StorageType.FILE:
        return FileTaskStorage(settings.tasks_file_path)
    if kind is StorageType.REMOTE:
        return RemoteTaskStorage(settings.remote_base_url, timeout=settings.remote_timeout_seconds)
    raise ValueError(f"unknown storage type: {kind!r}")
