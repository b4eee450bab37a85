"""Shared logging helpers for shelfmark."""

from __future__ import annotations

import logging

# httpx logs every request at INFO, one line per linked-data fetch
QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    force: bool = False,
    quiet_loggers: tuple[str, ...] = QUIET_LOGGERS,
) -> None:
    """Initialise the root logger for a resolution run.

    `level` may be a number or a level name ("DEBUG"). Transport loggers listed in
    `quiet_loggers` are held at WARNING unless DEBUG output was asked for.
    """

    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if level > logging.DEBUG:
        for name in quiet_loggers:
            logging.getLogger(name).setLevel(logging.WARNING)
