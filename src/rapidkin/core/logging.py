"""
Structured logging configuration for rapidkin.

Uses structlog (https://www.structlog.org/) so that solver and robot-model
events carry their numeric context as key/value pairs. Supports JSON output
(for log aggregation) and colored console output (interactive use).

Usage::

    from rapidkin.core.logging import configure_logging, get_logger

    configure_logging(json_output=False)  # Call once at startup
    logger = get_logger(__name__)
    logger.info("robot_kinematics_updated", a1=320.0, c4=250.0)
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

import structlog


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
    quiet_libraries: Iterable[str] = ("trimesh",),
) -> None:
    """
    Configure structured logging for the whole package.

    Call this once at startup (the CLI does it before running a command).

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_output: If True, render JSON lines; otherwise render colored
                     console-friendly lines.
        log_file: Optional path to write logs to a file in addition to stderr.
        quiet_libraries: Third-party loggers capped at WARNING.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=handlers,
        force=True,
    )

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    for handler in logging.root.handlers:
        handler.setFormatter(formatter)

    # trimesh logs every mesh it loads at INFO
    for library in quiet_libraries:
        logging.getLogger(library).setLevel(max(log_level, logging.WARNING))


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger for the given module name.

    Args:
        name: Module name, typically ``__name__``.

    Returns:
        A bound structlog logger instance.
    """
    return structlog.get_logger(name)


@contextmanager
def robot_context(robot_name: str, **context: object) -> Iterator[None]:
    """
    Bind the robot name (and any extra keys) to every event logged inside.

    Args:
        robot_name: Name of the robot the enclosed calls operate on.
        **context: Additional key/value pairs to bind.
    """
    with structlog.contextvars.bound_contextvars(robot=robot_name, **context):
        yield
