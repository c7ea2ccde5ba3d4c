# src/backlist/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field

from ..finance.ledger import LedgerService
from ..finance.ledger_store import LedgerStore
from ..tasks.lifecycle import LifecycleController, Presentation
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    task_store: TaskStore
    ledger_store: LedgerStore
    ledger: LedgerService
    controller: LifecycleController

    # Last short list shown in the console; cleared once it has been used.
    presentation: Presentation | None = field(default=None)
