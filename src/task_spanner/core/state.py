# src/task_spanner/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings
from ..tasks.task_models import TaskView
from .store import TaskStore


@dataclass
class AppState:
    """
    Everything the console/commands need, built once by cli.bootstrap.

    The TaskStore is created explicitly and handed in here; there is no
    process-wide store instance.
    """

    settings: Settings
    store: TaskStore

    view: TaskView = TaskView.UNFINISHED
