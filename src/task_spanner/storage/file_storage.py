# src/task_spanner/storage/file_storage.py

from __future__ import annotations

import logging
import os
from pathlib import Path

from .snapshot_storage import SnapshotTaskStorage

logger = logging.getLogger(__name__)


class FileTaskStorage(SnapshotTaskStorage):
    """JSON file holding the whole snapshot (pretty-printed, written atomically)."""

    name = "file"

    def __init__(self, path: str | Path = "tasks.json") -> None:
        super().__init__()
        self._path = Path(path)
        logger.info("FileTaskStorage ready path=%s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def describe(self) -> str:
        return f"file:{self._path}"

    def _read_raw(self) -> str | None:
        if not self._path.exists():
            return None
        return self._path.read_text("utf-8")

    def _write_raw(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(text, "utf-8")
        os.replace(tmp, self._path)
