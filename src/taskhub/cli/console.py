# src/taskhub/cli/console.py

from __future__ import annotations

import logging
from datetime import datetime

from ..core.errors import HierarchyError, NotFound, StoreError
from ..core.state import AppState
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def run_line(state: AppState, line: str) -> str:
    """
    Execute one console line and return the text to show.

    Typed failures become their user-facing message; anything else is logged
    and reported generically.
    """
    try:
        reply = command_registry.handle(state, line)
    except NotFound as e:
        return e.message
    except StoreError:
        return "Storage error. See the log file for details."
    except HierarchyError as e:
        return f"Refused: {e.message}"
    except Exception:
        logger.exception("Command handler crashed.")
        return "Internal error while handling a command."

    if reply is None:
        return "Commands start with '/'. Use /help to list them."
    return reply


def run_console_loop(state: AppState) -> None:
    user_id = state.identity.current_user_id()
    logger.info("Console started user=%s.", user_id)
    _print_ts(f"[CONSOLE] Signed in as {user_id}. Use /help for commands. Use /exit to quit.\n")

    while True:
        try:
            line = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        _print_ts(run_line(state, line))

    logger.info("Console finished.")
