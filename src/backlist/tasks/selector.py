# src/backlist/tasks/selector.py

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..core.ports import TaskRepo
from .task_models import Task
from .weighting import WeightResult, try_weight

logger = logging.getLogger(__name__)

DEFAULT_SHORTLIST_SIZE = 5


@dataclass(frozen=True, slots=True)
class ScoredTask:
    task: Task
    weight: float


@dataclass(slots=True)
class Ranking:
    scored: list[ScoredTask] = field(default_factory=list)
    rejected: list[WeightResult] = field(default_factory=list)

    @property
    def tasks(self) -> list[Task]:
        return [s.task for s in self.scored]


def rank_tasks(tasks: Iterable[Task], now_ts: float, k: int | None = None) -> Ranking:
    """
    Weigh every task and order them by descending weight.

    Ties keep their input order. Tasks that cannot be weighed go to `rejected`
    instead of the ranking. Pure: no store access.
    """
    ranking = Ranking()
    for task in tasks:
        result = try_weight(task, now_ts)
        if result.weight is not None:
            ranking.scored.append(ScoredTask(task=task, weight=result.weight))
        else:
            ranking.rejected.append(result)

    # sorted() is stable, and reverse=True keeps equal keys in input order.
    ranking.scored = sorted(ranking.scored, key=lambda s: s.weight, reverse=True)
    if k is not None:
        ranking.scored = ranking.scored[: max(0, int(k))]
    return ranking


class Selector:
    """Builds the short list and records that each listed task was shown."""

    def __init__(self, task_store: TaskRepo) -> None:
        self._task_store = task_store

    def select(self, tasks: Iterable[Task], now_ts: float, k: int = DEFAULT_SHORTLIST_SIZE) -> Ranking:
        ranking = rank_tasks(tasks, now_ts, k)

        for scored in ranking.scored:
            self._task_store.record_shown(scored.task.id)

        logger.debug(
            "Selected %d task(s) ids=%s rejected=%d",
            len(ranking.scored),
            [s.task.id for s in ranking.scored],
            len(ranking.rejected),
        )
        return ranking
