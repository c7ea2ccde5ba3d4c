# src/backlist/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The engine depends on Protocols instead of concrete implementations.
This keeps SQLite storage swappable and lets tests run against in-memory fakes.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..finance.ledger import Transaction
    from ..tasks.task_models import AllowanceSettings, Priority, Task


class TaskRepo(Protocol):
    # Reads (each selection cycle re-reads; nothing is cached between cycles)
    def list_active_tasks(self, *, now_ts: float) -> list[Task]: ...
    def list_open_tasks(self) -> list[Task]: ...
    def get_task(self, task_id: int) -> Task | None: ...
    def get_settings(self) -> AllowanceSettings: ...

    # Lifecycle writes
    def record_shown(self, task_id: int) -> None: ...
    def record_selected(self, task_id: int) -> None: ...
    def archive_task(self, task_id: int) -> None: ...
    def reschedule_task(self, task_id: int, now_ts: float) -> None: ...

    # Task creation (console /add)
    def add_task(
        self,
        *,
        summary: str,
        folder_id: int = 1,
        description: str | None = None,
        priority: Priority | None = None,
        due_date: float | None = None,
        lead_days: int | None = None,
        repeat_interval: int | None = None,
        average_duration: float | None = None,
        bounty_modifier: float = 0.0,
        now_ts: float | None = None,
    ) -> int: ...


class LedgerRepo(Protocol):
    def add_transaction(self, amount: float, *, now_ts: float | None = None) -> Transaction: ...
    def list_transactions(self) -> list[Transaction]: ...
