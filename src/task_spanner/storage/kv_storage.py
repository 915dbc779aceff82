# src/task_spanner/storage/kv_storage.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from pathlib import Path

from .snapshot_storage import SnapshotTaskStorage

logger = logging.getLogger(__name__)

STORAGE_KEY = "savedTasks"


class KeyValueTaskStorage(SnapshotTaskStorage):
    """
    SQLite-backed key-value store holding the whole snapshot under one key.

    The schema is intentionally simple:
    - kv(key TEXT PRIMARY KEY, value TEXT NOT NULL)
    - the forest JSON lives under STORAGE_KEY

    Thread-safety:
    - each method opens its own SQLite connection (calls run in worker threads)
    """

    name = "kv"
    io_errors = (OSError, sqlite3.Error)

    def __init__(self, db_path: str | Path = "tasks.sqlite3", *, key: str = STORAGE_KEY) -> None:
        super().__init__()
        self._db_path = Path(db_path)
        self._key = key
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("KeyValueTaskStorage ready db=%s key=%s", self._db_path, self._key)

    def describe(self) -> str:
        return f"kv:{self._db_path}#{self._key}"

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read_raw(self) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (self._key,)).fetchone()
            return None if row is None else str(row[0])
        finally:
            conn.close()

    def _write_raw(self, text: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO kv(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (self._key, text),
            )
            conn.commit()
        finally:
            conn.close()
