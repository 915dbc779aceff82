# src/task_spanner/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads the forest from the selected
backend, then runs the console REPL until /exit (or EOF / Ctrl+C).
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, start_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import resolve_level, setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.store.close()
    except Exception:
        logger.exception("Failed to close task storage.")


async def _run(state: AppState) -> None:
    try:
        await start_state(state)
        await run_console_loop(state)
    finally:
        await _shutdown(state)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(log_dir=settings.data_dir, console_level=resolve_level(settings.log_level))

    logger.info("Starting %s (storage=%s, log=%s)...", settings.app_name, settings.storage_type.value, log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    finally:
        logger.info("Bye.")


if __name__ == "__main__":
    main()
