# src/backlist/cli/commands.py

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..errors import BacklistError
from ..tasks.lifecycle import CompletionResult, LifecycleState, Presentation, TaskDiagnostic
from ..tasks.task_api import add_deadline_task, add_one_off_task, add_recurring_task
from ..tasks.task_models import Priority
from ..tasks.task_store import TARGET_ALLOWANCE_KEY

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

_PRIORITY_RE = re.compile(r"^[Pp][0-3]$")
_FOLDER_RE = re.compile(r"^@(\d+)$")

ADD_USAGE = (
    "Usage:\n"
    "  /add once [P0-P3] [@folder] <summary> [| description]\n"
    "  /add every <days> [P0-P3] [@folder] <summary> [| description]\n"
    "  /add due <days until due> <lead days> [P0-P3] [@folder] <summary> [| description]"
)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /todo, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return handler(state, args)
        except BacklistError as e:
            logger.warning("/%s failed: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _fmt_money(amount: float) -> str:
    return f"${amount:,.2f}"


def _fmt_date(ts: float) -> str:
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d")


def render_diagnostics(diagnostics: list[TaskDiagnostic]) -> list[str]:
    return [f"  ! {d.describe()}" for d in diagnostics]


def render_offers(presentation: Presentation) -> str:
    if not presentation.offers:
        lines = ["Nothing to do right now."]
    else:
        lines = ["Select a task to complete with /do <number>:", ""]
        for i, offer in enumerate(presentation.offers, start=1):
            bounty = _fmt_money(offer.bounty) if offer.bounty is not None else "no bounty"
            lines.append(f"{i}. {bounty}")
            lines.append(f"  - {offer.task.summary}")
            if offer.task.description:
                lines.append(f"        {offer.task.description}")
            if offer.task.due_date is not None:
                lines.append(f"        due {_fmt_date(offer.task.due_date)}")

    if presentation.diagnostics:
        lines.append("")
        lines.append("Some tasks were skipped:")
        lines.extend(render_diagnostics(presentation.diagnostics))
    return "\n".join(lines)


def render_completion(result: CompletionResult) -> str:
    lines = [f"You have selected: {result.task.summary}"]
    if result.task.description:
        lines.append(f"    {result.task.description}")
    if result.transaction is not None:
        lines.append(f"Earned {_fmt_money(result.transaction.amount)}.")
    if result.state is LifecycleState.RESCHEDULED:
        lines.append(f"It will come back in {result.task.repeat_interval} day(s).")
    else:
        lines.append("Task archived.")
    if result.diagnostics:
        lines.extend(render_diagnostics(result.diagnostics))
    return "\n".join(lines)


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_todo(state: AppState, args: list[str]) -> str:
    state.presentation = state.controller.present()
    return render_offers(state.presentation)


def cmd_do(state: AppState, args: list[str]) -> str:
    """
    /do <n>  -> complete the n-th task of the last /todo list
    """
    presentation = state.presentation
    if presentation is None or presentation.completed:
        return "No open short list. Use /todo first."
    if not args:
        return "Usage: /do <number>"
    try:
        choice = int(args[0])
    except ValueError:
        return "Invalid input!"
    if not 1 <= choice <= len(presentation.offers):
        return "Invalid input!"

    offer = presentation.offers[choice - 1]
    result = state.controller.complete(presentation, offer.task.id)
    state.presentation = None
    return render_completion(result)


def cmd_funds(state: AppState, args: list[str]) -> str:
    return f"You have {_fmt_money(state.ledger.balance())} remaining"


def cmd_spend(state: AppState, args: list[str]) -> str:
    """
    /spend <amount>  -> record a purchase
    """
    if not args:
        return "Usage: /spend <amount>"
    try:
        amount = float(args[0])
    except ValueError:
        return "Invalid input!"
    try:
        state.ledger.spend(amount)
    except ValueError as e:
        return f"Error: {e}"
    return f"You have {_fmt_money(state.ledger.balance())} remaining"


def _split_add_args(args: list[str]) -> tuple[Priority, int, str, str | None]:
    priority = Priority.P1
    folder_id = 1
    words: list[str] = []
    for tok in args:
        if not words and _PRIORITY_RE.match(tok):
            priority = Priority(tok.upper())
            continue
        m = _FOLDER_RE.match(tok)
        if not words and m:
            folder_id = int(m.group(1))
            continue
        words.append(tok)

    text = " ".join(words)
    summary, sep, description = text.partition("|")
    return priority, folder_id, summary.strip(), (description.strip() or None) if sep else None


def cmd_add(state: AppState, args: list[str]) -> str:
    if not args:
        return ADD_USAGE

    kind = args[0].lower()
    try:
        if kind == "once":
            priority, folder_id, summary, description = _split_add_args(args[1:])
            task_id = add_one_off_task(
                state.task_store,
                summary=summary,
                folder_id=folder_id,
                description=description,
                priority=priority,
            )
        elif kind == "every" and len(args) >= 2:
            priority, folder_id, summary, description = _split_add_args(args[2:])
            task_id = add_recurring_task(
                state.task_store,
                summary=summary,
                repeat_interval=int(args[1]),
                folder_id=folder_id,
                description=description,
                priority=priority,
            )
        elif kind == "due" and len(args) >= 3:
            priority, folder_id, summary, description = _split_add_args(args[3:])
            task_id = add_deadline_task(
                state.task_store,
                summary=summary,
                days_until_due=int(args[1]),
                lead_days=int(args[2]),
                folder_id=folder_id,
                description=description,
                priority=priority,
            )
        else:
            return ADD_USAGE
    except ValueError as e:
        return f"Problem adding task: {e}"

    return f"Task #{task_id} added."


def cmd_folders(state: AppState, args: list[str]) -> str:
    lines = ["Folders:"]
    for folder_id, path in state.task_store.list_folder_paths():
        lines.append(f"  @{folder_id} {path}")
    return "\n".join(lines)


def cmd_folder(state: AppState, args: list[str]) -> str:
    """
    /folder <parent id> <name>  -> add a folder under an existing one
    """
    if len(args) < 2:
        return "Usage: /folder <parent id> <name>"
    try:
        parent_id = int(args[0].lstrip("@"))
        folder_id = state.task_store.add_folder(name=" ".join(args[1:]), parent_id=parent_id)
    except ValueError as e:
        return f"Problem adding folder: {e}"
    return f"Folder @{folder_id} added."


def cmd_allowance(state: AppState, args: list[str]) -> str:
    """
    /allowance          -> show the monthly allowance
    /allowance <amount> -> set the target monthly allowance
    """
    if args:
        try:
            state.task_store.set_setting(TARGET_ALLOWANCE_KEY, float(args[0]))
        except ValueError as e:
            return f"Error: {e}"

    settings = state.task_store.get_settings()
    return (
        "Allowance:\n"
        f"  Target per month: {_fmt_money(settings.target_monthly_allowance)}\n"
        f"  Maximum per month: {_fmt_money(settings.maximum_monthly_allowance)}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("todo", cmd_todo, help_text="Show the tasks most worth doing now.", aliases=["t"])
registry.register("do", cmd_do, help_text="Complete a task from the last list: /do <number>.")
registry.register("funds", cmd_funds, help_text="Show remaining funds.", aliases=["shop"])
registry.register("spend", cmd_spend, help_text="Spend funds: /spend <amount>.")
registry.register("add", cmd_add, help_text="Add a task: /add once | every <days> | due <days> <lead>.")
registry.register("folders", cmd_folders, help_text="List folders.")
registry.register("folder", cmd_folder, help_text="Add a folder: /folder <parent id> <name>.")
registry.register("allowance", cmd_allowance, help_text="Show or set the target monthly allowance.")
