# src/backlist/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the SQLite stores, ledger and lifecycle controller into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.state import AppState
from ..finance.ledger import LedgerService
from ..finance.ledger_store import LedgerStore
from ..tasks.lifecycle import LifecycleController
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    task_store = TaskStore(
        settings.db_path,
        default_target_allowance=settings.default_target_allowance,
        default_maximum_allowance=settings.default_maximum_allowance,
    )
    ledger_store = LedgerStore(settings.db_path)
    ledger = LedgerService(ledger_store)

    state = AppState(
        settings=settings,
        task_store=task_store,
        ledger_store=ledger_store,
        ledger=ledger,
        controller=LifecycleController(task_store, ledger, shortlist_size=settings.shortlist_size),
    )
    logger.debug("AppState created db=%s", settings.db_path)
    return state
