# src/schedule_dashboard/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import SIGN_IN_HINT
from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (session=%s).", state.session.state.value)
    app_name = str(getattr(state.settings, "app_name", "schedule-dashboard"))
    _print_ts(f"[{app_name}] Use /help for commands. Use /exit to quit.\n")

    if state.session.is_authenticated:
        # Home view right away, like opening the dashboard.
        default_view = str(getattr(state.settings, "default_view", "day"))
        _print_ts(await command_registry.handle(state, f"/view {default_view}") or "")
    else:
        _print_ts(SIGN_IN_HINT)

    while True:
        try:
            # input() blocks; keep the event loop free for in-flight requests.
            user_input = (await asyncio.to_thread(input, ">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            user_input = "/" + user_input

        try:
            response = await command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is not None:
            print(f"[{_ts_local()}] {response}\n")

    logger.info("Console connector finished.")
