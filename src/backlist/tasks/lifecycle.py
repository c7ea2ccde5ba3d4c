# src/backlist/tasks/lifecycle.py

from __future__ import annotations

"""
Task lifecycle: present a short list, let the user pick one, pay the bounty,
then archive or reschedule the chosen task.

Per task instance:
  PRESENTED --select--> SELECTED --complete--> ARCHIVED     (one-off / due)
                                 --complete--> RESCHEDULED  (repeating)

The transition function and completion plan are pure. LifecycleController
applies a plan through the task store and the ledger. Rendering lives in the
console connector and only consumes the objects returned here.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import StrEnum

from ..core.ports import TaskRepo
from ..errors import InvalidTransition, InvariantViolation
from ..finance.bounty import estimate_monthly_tasks, quote_bounty
from ..finance.ledger import LedgerService, Transaction
from .selector import DEFAULT_SHORTLIST_SIZE, Selector
from .task_models import Task, TemporalMode, temporal_mode

logger = logging.getLogger(__name__)


class LifecycleState(StrEnum):
    PRESENTED = "presented"
    SELECTED = "selected"
    ARCHIVED = "archived"
    RESCHEDULED = "rescheduled"


class LifecycleEvent(StrEnum):
    SELECT = "select"
    COMPLETE = "complete"


def transition(state: LifecycleState, event: LifecycleEvent, *, repeating: bool = False) -> LifecycleState:
    if state is LifecycleState.PRESENTED and event is LifecycleEvent.SELECT:
        return LifecycleState.SELECTED
    if state is LifecycleState.SELECTED and event is LifecycleEvent.COMPLETE:
        return LifecycleState.RESCHEDULED if repeating else LifecycleState.ARCHIVED
    raise InvalidTransition(f"cannot {event.value} a task in state {state.value}")


@dataclass(frozen=True, slots=True)
class TaskDiagnostic:
    task_id: int | None
    summary: str | None
    message: str

    def describe(self) -> str:
        if self.task_id is None:
            return self.message
        return f"Task #{self.task_id} '{self.summary}': {self.message}"


@dataclass(frozen=True, slots=True)
class Offer:
    task: Task
    weight: float
    bounty: float | None  # None when no payout could be computed this cycle


@dataclass(slots=True)
class Presentation:
    now_ts: float
    offers: list[Offer] = field(default_factory=list)
    diagnostics: list[TaskDiagnostic] = field(default_factory=list)
    monthly_task_estimate: int = 0
    completed: bool = False

    def find(self, task_id: int) -> Offer | None:
        for offer in self.offers:
            if offer.task.id == task_id:
                return offer
        return None


@dataclass(frozen=True, slots=True)
class CompletionPlan:
    task_id: int
    final_state: LifecycleState
    payout: float | None
    new_from_date: float | None


@dataclass(slots=True)
class CompletionResult:
    task: Task
    state: LifecycleState
    transaction: Transaction | None
    diagnostics: list[TaskDiagnostic] = field(default_factory=list)


def plan_completion(task: Task, now_ts: float, bounty: float | None) -> CompletionPlan:
    """Decide everything a selection will change, without touching any store."""
    state = transition(LifecycleState.PRESENTED, LifecycleEvent.SELECT)
    repeating = temporal_mode(task) is TemporalMode.REPEATING
    final = transition(state, LifecycleEvent.COMPLETE, repeating=repeating)
    return CompletionPlan(
        task_id=task.id,
        final_state=final,
        payout=bounty,
        new_from_date=now_ts if final is LifecycleState.RESCHEDULED else None,
    )


def _diagnostic_for(task: Task, error: Exception) -> TaskDiagnostic:
    message = error.args[0] if isinstance(error, InvariantViolation) and error.args else str(error)
    return TaskDiagnostic(task_id=task.id, summary=task.summary, message=str(message))


class LifecycleController:
    """
    Runs one selection cycle at a time.

    Malformed tasks never abort a cycle: they are left out of the ranking and the
    estimate, and reported back as diagnostics.
    """

    def __init__(
        self,
        task_store: TaskRepo,
        ledger: LedgerService,
        *,
        shortlist_size: int = DEFAULT_SHORTLIST_SIZE,
    ) -> None:
        self._task_store = task_store
        self._ledger = ledger
        self._selector = Selector(task_store)
        self._shortlist_size = max(1, int(shortlist_size))

    def present(self, now_ts: float | None = None) -> Presentation:
        if now_ts is None:
            now_ts = time.time()

        # Read settings first: a configuration error must not leave tasks marked as shown.
        settings = self._task_store.get_settings()

        presentation = Presentation(now_ts=now_ts)

        active = self._task_store.list_active_tasks(now_ts=now_ts)
        ranking = self._selector.select(active, now_ts, self._shortlist_size)
        for rejected in ranking.rejected:
            if rejected.error is not None:
                presentation.diagnostics.append(_diagnostic_for(rejected.task, rejected.error))

        estimate = self._estimate(now_ts, presentation.diagnostics)
        presentation.monthly_task_estimate = estimate

        quote_error: TaskDiagnostic | None = None
        for scored in ranking.scored:
            quote = quote_bounty(
                scored.task,
                target_allowance=settings.target_monthly_allowance,
                monthly_task_estimate=estimate,
            )
            if not quote.ok and quote_error is None:
                quote_error = TaskDiagnostic(task_id=None, summary=None, message=str(quote.error))
            presentation.offers.append(Offer(task=scored.task, weight=scored.weight, bounty=quote.value))

        if quote_error is not None:
            presentation.diagnostics.append(quote_error)

        for diag in presentation.diagnostics:
            logger.warning("Selection cycle diagnostic: %s", diag.describe())

        logger.info(
            "Presented %d task(s); monthly estimate=%d diagnostics=%d",
            len(presentation.offers),
            estimate,
            len(presentation.diagnostics),
        )
        return presentation

    def complete(self, presentation: Presentation, task_id: int, now_ts: float | None = None) -> CompletionResult:
        """Select a presented task, pay its bounty, then archive or reschedule it."""
        if presentation.completed:
            raise InvalidTransition("this short list has already been used; present a new one")

        offer = presentation.find(task_id)
        if offer is None:
            raise InvalidTransition(f"task {task_id} was not presented in this cycle")

        if now_ts is None:
            now_ts = time.time()

        plan = plan_completion(offer.task, now_ts, offer.bounty)
        result = CompletionResult(task=offer.task, state=plan.final_state, transaction=None)

        # Pay first. A failed payout leaves the list usable; a recorded one spends it.
        if plan.payout is not None:
            result.transaction = self._ledger.append(plan.payout, now_ts=now_ts)
        presentation.completed = True

        self._task_store.record_selected(plan.task_id)
        if plan.payout is None:
            result.diagnostics.append(
                TaskDiagnostic(
                    task_id=offer.task.id,
                    summary=offer.task.summary,
                    message="no bounty could be computed, so nothing was paid out",
                )
            )

        if plan.new_from_date is not None:
            self._task_store.reschedule_task(plan.task_id, plan.new_from_date)
        else:
            self._task_store.archive_task(plan.task_id)

        for diag in result.diagnostics:
            logger.warning("Completion diagnostic: %s", diag.describe())

        logger.info(
            "Task %s -> %s payout=%s",
            plan.task_id,
            plan.final_state.value,
            "none" if plan.payout is None else f"{plan.payout:.2f}",
        )
        return result

    def _estimate(self, now_ts: float, diagnostics: list[TaskDiagnostic]) -> int:
        seen = {d.task_id for d in diagnostics}
        valid: list[Task] = []
        for task in self._task_store.list_open_tasks():
            try:
                temporal_mode(task)
            except InvariantViolation as e:
                if task.id not in seen:
                    diagnostics.append(_diagnostic_for(task, e))
                    seen.add(task.id)
                continue
            valid.append(task)
        return estimate_monthly_tasks(valid, now_ts)
