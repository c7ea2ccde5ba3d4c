# src/backlist/tasks/weighting.py

from __future__ import annotations

"""
Urgency weights for candidate tasks.

Every formula divides absolute epoch seconds rather than elapsed time, so the
ratios sit close to 1 for most of a task's life and grow without a clamp once a
threshold has passed. Rankings built on these numbers are part of the observable
behavior and must not be "fixed" to elapsed-time deltas without a migration of
expectations.
"""

import logging
from dataclasses import dataclass

from ..errors import InvariantViolation
from .task_models import (
    SECONDS_PER_DAY,
    Task,
    TemporalMode,
    is_repeat_eligible,
    repeat_eligible_at,
    temporal_mode,
)

logger = logging.getLogger(__name__)

ONE_OFF_REFERENCE_DAYS = 20
OVERDUE_SLOPE = 100.0


@dataclass(frozen=True, slots=True)
class WeightResult:
    """Outcome of scoring one task: either a weight or the reason it has none."""

    task: Task
    weight: float | None = None
    error: InvariantViolation | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def calculate_weight(task: Task, now_ts: float) -> float:
    """
    Score a task at now_ts. Pure and deterministic.

    Raises InvariantViolation when the task does not satisfy exactly one temporal mode.
    """
    mode = temporal_mode(task)
    if mode is TemporalMode.DUE:
        return _weight_due_task(task, now_ts)
    if mode is TemporalMode.REPEATING:
        return _weight_repeat_task(task, now_ts)
    return _weight_oneoff_task(task, now_ts)


def try_weight(task: Task, now_ts: float) -> WeightResult:
    try:
        return WeightResult(task=task, weight=calculate_weight(task, now_ts))
    except InvariantViolation as e:
        logger.debug("Cannot weigh task id=%s: %s", task.id, e)
        return WeightResult(task=task, error=e)


def _weight_due_task(task: Task, now_ts: float) -> float:
    due_date, lead_days = task.due_date, task.lead_days
    if due_date is None or lead_days is None:
        raise InvariantViolation(
            "due task needs both a due date and lead days",
            task_id=task.id,
            summary=task.summary,
        )

    lead_s = float(lead_days * SECONDS_PER_DAY)
    window_opens = due_date - lead_s

    if now_ts <= window_opens:
        # y = now / (due - lead)
        weight = now_ts / window_opens
    else:
        # y = 1 + 100 * (now - due + lead) / lead
        weight = 1.0 + OVERDUE_SLOPE * (now_ts - due_date + lead_s) / lead_s

    return weight * task.priority.multiplier


def _weight_repeat_task(task: Task, now_ts: float) -> float:
    if not is_repeat_eligible(task, now_ts):
        return 0.0

    # y = 0.667x + 0.333, x = now / (from + interval)
    return task.priority.multiplier * (0.667 * (now_ts / repeat_eligible_at(task)) + 0.333)


def _weight_oneoff_task(task: Task, now_ts: float) -> float:
    reference = task.from_date + ONE_OFF_REFERENCE_DAYS * SECONDS_PER_DAY

    # y = 0.667x + 1, x = now / (from + 20 days)
    return task.priority.multiplier * (0.667 * (now_ts / reference) + 1.0)
