# src/task_spanner/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Settings are passed explicitly (composition root), never mutated globally.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from dotenv import load_dotenv

from .tasks.task_models import TaskMode

ENV_PREFIX = "TASK_SPANNER"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


# A local .env never overrides variables already set in the environment.
load_dotenv(override=False)


class StorageType(StrEnum):
    KV = "kv"
    FILE = "file"
    REMOTE = "remote"

    @classmethod
    def parse(cls, raw: str | None, default: StorageType) -> StorageType:
        if not raw or not raw.strip():
            return default
        s = raw.strip().lower()
        # legacy names used by the desktop client
        if s == "userdefaults":
            return cls.KV
        try:
            return cls(s)
        except ValueError:
            return default


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_mode(name: str) -> TaskMode | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return TaskMode.from_raw(raw)


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage selection ----
    storage_type: StorageType

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    kv_db_path: Path
    tasks_file_path: Path

    # ---- Remote task server ----
    remote_base_url: str
    remote_timeout_seconds: float

    # ---- Startup view ----
    default_mode: TaskMode | None

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-spanner") or "task-spanner"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        storage_type = StorageType.parse(os.getenv(_k("STORAGE")), StorageType.KV)

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task-spanner"))
        kv_db_path = _env_path(_k("KV_DB_PATH"), data_dir / "tasks.sqlite3")
        tasks_file_path = _env_path(_k("TASKS_FILE"), data_dir / "tasks.json")

        remote_base_url = _env(_k("REMOTE_BASE_URL"), "http://localhost:7021").strip() or "http://localhost:7021"
        remote_timeout_seconds = max(0.5, _env_float(_k("REMOTE_TIMEOUT_SECONDS"), 10.0))

        default_mode = _env_mode(_k("MODE"))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            storage_type=storage_type,
            data_dir=data_dir,
            kv_db_path=kv_db_path,
            tasks_file_path=tasks_file_path,
            remote_base_url=remote_base_url,
            remote_timeout_seconds=remote_timeout_seconds,
            default_mode=default_mode,
        )


def get_settings() -> Settings:
    """Read settings from the current environment."""
    return Settings.from_env()
