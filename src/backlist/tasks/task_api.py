# src/backlist/tasks/task_api.py

from __future__ import annotations

import logging
import time

from ..core.ports import TaskRepo
from .task_models import SECONDS_PER_DAY, Priority

logger = logging.getLogger(__name__)


def add_one_off_task(
    task_store: TaskRepo,
    *,
    summary: str,
    folder_id: int = 1,
    description: str | None = None,
    priority: Priority = Priority.P1,
) -> int:
    return task_store.add_task(
        summary=summary,
        folder_id=folder_id,
        description=description,
        priority=priority,
    )


def add_recurring_task(
    task_store: TaskRepo,
    *,
    summary: str,
    repeat_interval: int,
    folder_id: int = 1,
    description: str | None = None,
    priority: Priority = Priority.P1,
) -> int:
    if int(repeat_interval) <= 0:
        raise ValueError("repeat interval must be at least one day")

    return task_store.add_task(
        summary=summary,
        folder_id=folder_id,
        description=description,
        priority=priority,
        repeat_interval=int(repeat_interval),
    )


def add_deadline_task(
    task_store: TaskRepo,
    *,
    summary: str,
    days_until_due: int,
    lead_days: int,
    folder_id: int = 1,
    description: str | None = None,
    priority: Priority = Priority.P1,
    now_ts: float | None = None,
) -> int:
    """
    Convenience helper: a task with a hard deadline `days_until_due` days from now.
    Its urgency starts ramping `lead_days` days before the deadline.
    """
    if int(days_until_due) < 0:
        raise ValueError("days until the deadline must not be negative")
    if int(lead_days) <= 0:
        raise ValueError("lead days must be at least one day")

    if now_ts is None:
        now_ts = time.time()
    due_date = now_ts + int(days_until_due) * SECONDS_PER_DAY

    task_id = task_store.add_task(
        summary=summary,
        folder_id=folder_id,
        description=description,
        priority=priority,
        due_date=due_date,
        lead_days=int(lead_days),
        now_ts=now_ts,
    )
    logger.info("Deadline task %s due in %s day(s)", task_id, days_until_due)
    return task_id
