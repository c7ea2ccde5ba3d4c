# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from backlist.cli.bootstrap import create_initial_state
from backlist.core.state import AppState
from backlist.finance.ledger_store import LedgerStore
from backlist.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap code.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated from the developer's environment and .env.
    """
    return SimpleNamespace(
        app_name="backlist-test",
        data_dir=tmp_path,
        db_path=tmp_path / "backlist.sqlite3",
        shortlist_size=5,
        default_target_allowance=400.0,
        default_maximum_allowance=600.0,
    )


@pytest.fixture()
def task_store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.db_path)


@pytest.fixture()
def ledger_store(settings: SimpleNamespace) -> LedgerStore:
    return LedgerStore(settings.db_path)


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired through the real bootstrap.

    NOTE: We keep real SQLite stores here because their correctness is part of
    what we want to test.
    """
    return create_initial_state(settings=settings)
