from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path


def level_from_flags(*, verbose: bool = False, debug: bool = False) -> int:
    """Map the CLI verbosity flags to a stdlib logging level.

    Args:
        verbose: Whether `--verbose` was given.
        debug: Whether `--debug` was given. Takes precedence over `verbose`.

    Returns:
        The logging level to configure.
    """
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


def setup_logging(
    level: int = logging.WARNING,
    filename: str | Path | None = None,
    *,
    force: bool = False,
) -> structlog.BoundLogger:
    """Set up structured logging for the doctldr package.

    The import-time call leaves existing root handlers alone; the CLI calls
    again with `force=True` once its flags are known.

    Args:
        level: Minimum level of emitted events.
        filename: Optional path to a log file. If None, logs are written to stderr.
        force: Replace the handlers already attached to the root logger.

    Returns:
        A structlog logger instance configured for the doctldr package.
    """
    handlers: list[logging.Handler] = []
    if filename:
        handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=level,
        handlers=handlers,
        format="%(message)s",
        force=force,
    )
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    return structlog.get_logger("doctldr")


logger = setup_logging()
