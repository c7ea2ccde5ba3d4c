# tests/test_commands.py

from __future__ import annotations

from backlist.cli.commands import CommandRegistry, registry
from backlist.core.state import AppState
from backlist.errors import InvariantViolation


def test_command_registry_routes_and_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    called = {"a": 0}

    def handler(state, args):
        called["a"] += 1
        return " ".join(args)

    reg.register("alpha", handler, "alpha", aliases=["a"])

    assert reg.handle(state, "/alpha x y") == "x y"
    assert reg.handle(state, "/A z") == "z"
    assert called["a"] == 2
    assert "/alpha - alpha" in reg.build_help()


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_command_registry_reports_domain_errors(state: AppState) -> None:
    reg = CommandRegistry()

    def broken(state, args):
        raise InvariantViolation("bad task", task_id=3, summary="x")

    reg.register("broken", broken, "broken")
    assert (reg.handle(state, "/broken") or "").startswith("Error: task 3")


def test_add_todo_do_funds_flow(state: AppState) -> None:
    assert registry.handle(state, "/add once P2 Wash dishes | use soap") == "Task #1 added."
    assert registry.handle(state, "/add every 7 Water plants") == "Task #2 added."
    assert registry.handle(state, "/add due 10 3 P3 File taxes") == "Task #3 added."

    listing = registry.handle(state, "/todo") or ""
    assert "Wash dishes" in listing
    assert "use soap" in listing
    assert "File taxes" in listing
    # the recurring task was just created, so it is still cooling down
    assert "Water plants" not in listing
    # 30 // 7 + 2 recent tasks = 6 -> 400 / 6
    assert "$66.67" in listing

    done = registry.handle(state, "/do 1") or ""
    assert done.startswith("You have selected:")
    assert "Earned $66.67." in done

    assert registry.handle(state, "/do 1") == "No open short list. Use /todo first."
    assert registry.handle(state, "/funds") == "You have $66.67 remaining"


def test_add_rejects_bad_input(state: AppState) -> None:
    assert "Usage" in (registry.handle(state, "/add") or "")
    assert "Usage" in (registry.handle(state, "/add sometimes Nap") or "")
    assert (registry.handle(state, "/add every 0 Nap") or "").startswith("Problem adding task")
    assert (registry.handle(state, "/add once P1") or "").startswith("Problem adding task")
    assert (registry.handle(state, "/add once @9 Nowhere") or "").startswith("Problem adding task")
    assert state.task_store.count_tasks() == 0


def test_do_validates_choice(state: AppState) -> None:
    registry.handle(state, "/add once Only task")
    registry.handle(state, "/todo")

    assert registry.handle(state, "/do") == "Usage: /do <number>"
    assert registry.handle(state, "/do two") == "Invalid input!"
    assert registry.handle(state, "/do 2") == "Invalid input!"
    assert state.presentation is not None and not state.presentation.completed


def test_spend_and_allowance(state: AppState) -> None:
    state.ledger.append(50.0)

    assert registry.handle(state, "/spend 12.5") == "You have $37.50 remaining"
    assert registry.handle(state, "/spend 0") == "You have $37.50 remaining"
    assert (registry.handle(state, "/spend -3") or "").startswith("Error:")
    assert registry.handle(state, "/spend lots") == "Invalid input!"

    out = registry.handle(state, "/allowance 500") or ""
    assert "Target per month: $500.00" in out
    assert "Maximum per month: $600.00" in out


def test_folder_commands(state: AppState) -> None:
    assert registry.handle(state, "/folder @1 Chores") == "Folder @2 added."
    listing = registry.handle(state, "/folders") or ""
    assert "@2 General::Chores" in listing
    assert registry.handle(state, "/add once @2 Mop floor") == "Task #1 added."
    assert (registry.handle(state, "/folder 77 Ghost") or "").startswith("Problem adding folder")


def test_spend_and_allowance_reject_non_finite_amounts(state: AppState) -> None:
    state.ledger.append(50.0)

    for raw in ("inf", "nan", "-inf"):
        assert (registry.handle(state, f"/spend {raw}") or "").startswith("Error:")
        assert (registry.handle(state, f"/allowance {raw}") or "").startswith("Error:")

    assert registry.handle(state, "/funds") == "You have $50.00 remaining"
    assert len(state.ledger.transactions()) == 1
    assert state.task_store.get_settings().target_monthly_allowance == 400.0

    registry.handle(state, "/add once Sweep")
    assert "1. $400.00" in (registry.handle(state, "/todo") or "")
