# src/backlist/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def print_header(title: str, write: Callable[[str], None] = print) -> None:
    text = f"  Backlist > {title}"
    border = "=" * (len(text) + 2)
    write(f"\n{border}\n{text}\n{border}")


def run_console_loop(
    state: AppState,
    *,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    logger.info("Console connector started.")
    print_header("Home", write)
    write("Type /todo to see what to do next. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = read_line(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            write("")
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # A bare number picks from the last /todo list.
            if user_input.isdigit() and state.presentation is not None:
                user_input = f"/do {user_input}"
            else:
                write("Invalid input! Use /help to list available commands.")
                continue

        try:
            response = command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            write(response)

    logger.info("Console connector finished.")
