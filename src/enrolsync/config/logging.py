"""Shared logging helpers for enrolsync."""

from __future__ import annotations

import logging
import os

# Libraries that log every request at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "alembic.runtime.migration")


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger for CLI and function invocations.

    ``level`` falls back to ``LOG_LEVEL`` (a level name) and then INFO. Pass
    ``force=True`` to reconfigure during tests.
    """

    if level is None:
        level = logging.getLevelNamesMapping().get(
            os.getenv("LOG_LEVEL", "INFO").strip().upper(), logging.INFO
        )
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        force=force,
    )
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
