# tests/test_logging_setup.py

from __future__ import annotations

import logging

from task_spanner.logging_setup import _ConsoleNoiseFilter, resolve_level


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_quiets_storage_and_third_party() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("task_spanner.core.store", logging.INFO))
    assert not f.filter(_record("task_spanner.storage.kv_storage", logging.INFO))
    assert f.filter(_record("task_spanner.storage.kv_storage", logging.WARNING))
    assert not f.filter(_record("httpx", logging.WARNING))
    assert f.filter(_record("httpx", logging.ERROR))


def test_resolve_level() -> None:
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("nonsense") == logging.INFO
