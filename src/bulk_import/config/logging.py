"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

OUTCOME_LOGGER_NAME = "bulk_import.outcomes"


def configure_logging(
    *,
    level: int = logging.INFO,
    force: bool = False,
    echo_outcomes: bool = False,
) -> None:
    """Initialise the root logger with a terse CLI format.

    Per-row outcome lines are written by ``ImportLogger`` to their own logger and
    only reach the console when ``echo_outcomes`` is set. SQLAlchemy's engine
    logger is held at WARNING so ``echo``-style statement logs never leak into
    import reports.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger(OUTCOME_LOGGER_NAME).propagate = echo_outcomes
