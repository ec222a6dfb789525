# src/schedule_dashboard/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, restores a persisted session (if the
server still accepts it), then runs the console dashboard until /exit.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state, shutdown
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _run(settings) -> None:
    state = create_initial_state(settings=settings)
    try:
        await state.session.initialize()
        await run_console_loop(state)
    finally:
        await shutdown(state)


def main() -> None:
    settings = get_settings()

    # choose console log level from settings.log_level
    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info(
        "Starting %s (%s)...",
        settings.app_name,
        "offline demo" if settings.offline_mode else settings.api_base_url,
    )

    try:
        asyncio.run(_run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
