# src/backlist/tasks/task_models.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from ..errors import InvariantViolation

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


class Priority(StrEnum):
    """
    Task priority, persisted as its text tag ("P0".."P3").

    Notes:
    - legacy rows stored the level as a bare integer; from_db still reads those.
    - unknown values fall back to P1, the default level offered on input.
    """

    P0 = "P0"  # deprioritized
    P1 = "P1"  # default
    P2 = "P2"  # high
    P3 = "P3"  # top

    @property
    def multiplier(self) -> float:
        return _PRIORITY_MULTIPLIERS[self]

    @classmethod
    def from_db(cls, raw: object) -> Priority:
        if raw is None:
            return cls.P1
        text = str(raw).strip().upper()
        if text.isdigit():
            text = f"P{text}"
        try:
            return cls(text)
        except ValueError:
            logger.warning("Unknown stored priority %r, using %s", raw, cls.P1.value)
            return cls.P1


_PRIORITY_MULTIPLIERS: dict[Priority, float] = {
    Priority.P0: 2.0,
    Priority.P1: 3.0,
    Priority.P2: 5.0,
    Priority.P3: 8.0,
}


class TemporalMode(StrEnum):
    DUE = "due"
    REPEATING = "repeating"
    ONE_OFF = "one_off"


class FolderStyle(StrEnum):
    DIRECTORY = "Directory"
    SELECTOR = "Selector"
    ITERATOR = "Iterator"


@dataclass(slots=True)
class Task:
    id: int
    folder_id: int
    archived: bool
    summary: str
    from_date: float

    priority: Priority = Priority.P1
    description: str | None = None
    average_duration: float | None = None  # seconds; reserved
    bounty_modifier: float = 0.0  # reserved multiplier, not used in payouts yet

    due_date: float | None = None
    lead_days: int | None = None
    repeat_interval: int | None = None  # days

    times_selected: int = 0
    times_shown: int = 0


@dataclass(frozen=True, slots=True)
class Folder:
    id: int
    parent_id: int | None
    name: str
    style: FolderStyle = FolderStyle.DIRECTORY
    status: int | None = None


@dataclass(frozen=True, slots=True)
class AllowanceSettings:
    target_monthly_allowance: float
    maximum_monthly_allowance: float  # reserved for a payout cap


def check_mode_fields(
    *,
    due_date: float | None,
    lead_days: int | None,
    repeat_interval: int | None,
    task_id: int | None = None,
    summary: str | None = None,
) -> TemporalMode:
    """
    Return the single temporal mode described by these fields.

    Raises InvariantViolation when the fields describe no valid mode or more than one.
    """

    def fail(message: str) -> InvariantViolation:
        return InvariantViolation(message, task_id=task_id, summary=summary)

    if due_date is not None:
        if repeat_interval is not None:
            raise fail("task has both a due date and a repeat interval")
        if lead_days is None:
            raise fail("task has a due date but no lead days")
        if lead_days <= 0:
            raise fail(f"lead days must be positive, got {lead_days}")
        return TemporalMode.DUE

    if lead_days is not None:
        raise fail("task has lead days but no due date")

    if repeat_interval is not None:
        if repeat_interval <= 0:
            raise fail(f"repeat interval must be positive, got {repeat_interval}")
        return TemporalMode.REPEATING

    return TemporalMode.ONE_OFF


def temporal_mode(task: Task) -> TemporalMode:
    return check_mode_fields(
        due_date=task.due_date,
        lead_days=task.lead_days,
        repeat_interval=task.repeat_interval,
        task_id=task.id,
        summary=task.summary,
    )


def repeat_eligible_at(task: Task) -> float:
    """Epoch seconds after which a repeating task may be shown again."""
    if task.repeat_interval is None:
        raise InvariantViolation("task has no repeat interval", task_id=task.id, summary=task.summary)
    return task.from_date + task.repeat_interval * SECONDS_PER_DAY


def is_repeat_eligible(task: Task, now_ts: float) -> bool:
    """
    Shared eligibility predicate for repeating tasks.

    A task becomes eligible strictly after its interval has elapsed; the store's
    active-task filter and the weight function both use this check.
    """
    return now_ts > repeat_eligible_at(task)
