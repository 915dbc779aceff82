# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from task_spanner.config import Settings, StorageType
from task_spanner.core.state import AppState
from task_spanner.core.store import TaskStore

from .fakes import FakeStorage


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Settings pointing at a tmp directory.

    Built directly rather than from_env() to keep tests independent of the
    developer's shell and .env file.
    """
    return Settings(
        app_name="task-spanner-test",
        log_level="DEBUG",
        storage_type=StorageType.FILE,
        data_dir=tmp_path,
        kv_db_path=tmp_path / "tasks.sqlite3",
        tasks_file_path=tmp_path / "tasks.json",
        remote_base_url="http://tasks.test",
        remote_timeout_seconds=1.0,
        default_mode=None,
    )


@pytest.fixture()
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture()
def store(storage: FakeStorage) -> TaskStore:
    return TaskStore(storage)


@pytest.fixture()
def state(settings: Settings, store: TaskStore) -> AppState:
    return AppState(settings=settings, store=store)
