# tests/test_config.py

from __future__ import annotations

from pathlib import Path

from task_spanner.config import Settings, StorageType
from task_spanner.storage.factory import create_storage
from task_spanner.storage.file_storage import FileTaskStorage
from task_spanner.storage.kv_storage import KeyValueTaskStorage
from task_spanner.tasks.task_models import TaskMode


def test_storage_type_parse() -> None:
    assert StorageType.parse("FILE", StorageType.KV) is StorageType.FILE
    assert StorageType.parse("userDefaults", StorageType.FILE) is StorageType.KV
    assert StorageType.parse("floppy", StorageType.REMOTE) is StorageType.REMOTE
    assert StorageType.parse(None, StorageType.KV) is StorageType.KV


def test_settings_from_env(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("TASK_SPANNER_STORAGE", "remote")
    monkeypatch.setenv("TASK_SPANNER_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TASK_SPANNER_REMOTE_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.setenv("TASK_SPANNER_MODE", "Work")
    monkeypatch.delenv("TASK_SPANNER_KV_DB_PATH", raising=False)
    monkeypatch.delenv("TASK_SPANNER_REMOTE_BASE_URL", raising=False)

    s = Settings.from_env()

    assert s.storage_type is StorageType.REMOTE
    assert s.kv_db_path == tmp_path / "tasks.sqlite3"
    assert s.remote_timeout_seconds == 10.0
    assert s.remote_base_url == "http://localhost:7021"
    assert s.default_mode is TaskMode.WORK


def test_create_storage_follows_settings(settings) -> None:
    assert isinstance(create_storage(settings), FileTaskStorage)
    assert isinstance(create_storage(settings, StorageType.KV), KeyValueTaskStorage)
