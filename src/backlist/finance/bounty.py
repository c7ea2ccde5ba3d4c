# src/backlist/finance/bounty.py

from __future__ import annotations

"""
Bounty calculation: turn a monthly allowance into a per-task payout.

The monthly estimate counts every recurring task by how often it recurs in a
30-day month, plus one-off and deadline tasks created in the last few days.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..errors import BacklistError, NoMonthlyTasksError
from ..tasks.task_models import SECONDS_PER_DAY, Task, TemporalMode, temporal_mode

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30
RECENT_TASK_DAYS = 3


@dataclass(frozen=True, slots=True)
class BountyQuote:
    """A payout for one task, or the error that prevented computing it."""

    task: Task
    value: float | None = None
    error: BacklistError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def estimate_monthly_tasks(tasks: Iterable[Task], now_ts: float) -> int:
    """
    Expected number of tasks completed per month.

    Archived tasks must already be excluded by the caller.
    Raises InvariantViolation for a task that does not describe a single temporal mode.
    """
    total = 0
    recent_cutoff = now_ts - RECENT_TASK_DAYS * SECONDS_PER_DAY
    for task in tasks:
        mode = temporal_mode(task)
        if mode is TemporalMode.REPEATING and task.repeat_interval is not None:
            total += DAYS_PER_MONTH // task.repeat_interval
        elif task.from_date > recent_cutoff:
            total += 1
    return total


def base_value(target_allowance: float, monthly_task_estimate: int) -> float:
    """Payout for an average task before any per-task weighting, rounded to cents."""
    if monthly_task_estimate == 0:
        raise NoMonthlyTasksError(target_allowance)
    return round(float(target_allowance) / monthly_task_estimate, 2)


def adjusted_value(task: Task, base: float) -> float:
    """
    Per-task payout.

    Returns the base value unchanged. This is where times_shown/times_selected and
    bounty_modifier will eventually scale the payout.
    """
    return base


def quote_bounty(task: Task, *, target_allowance: float, monthly_task_estimate: int) -> BountyQuote:
    try:
        base = base_value(target_allowance, monthly_task_estimate)
    except NoMonthlyTasksError as e:
        logger.debug("No bounty for task id=%s: %s", task.id, e)
        return BountyQuote(task=task, error=e)
    return BountyQuote(task=task, value=adjusted_value(task, base))
