# src/backlist/errors.py

"""Typed errors raised by the prioritization and reward engine."""

from __future__ import annotations


class BacklistError(Exception):
    """Base class for every recoverable error raised by backlist."""


class ConfigurationError(BacklistError):
    """A settings row is missing or cannot be parsed."""


class NoMonthlyTasksError(BacklistError, ArithmeticError):
    """The monthly task estimate is zero, so a base value cannot be derived."""

    def __init__(self, target_allowance: float) -> None:
        super().__init__(
            f"Cannot split an allowance of {target_allowance:.2f} across zero expected monthly tasks."
        )
        self.target_allowance = target_allowance


class InvariantViolation(BacklistError):
    """A task's fields do not describe exactly one valid temporal mode."""

    def __init__(self, message: str, *, task_id: int | None = None, summary: str | None = None) -> None:
        super().__init__(message)
        self.task_id = task_id
        self.summary = summary

    def __str__(self) -> str:
        base = super().__str__()
        if self.task_id is None:
            return base
        return f"task {self.task_id} ({self.summary!r}): {base}"


class InvalidTransition(BacklistError):
    """A lifecycle event is not allowed in the task's current state."""
