"""Logging utilities for docbench commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "docbench"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the docbench hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


class TaskLogAdapter(logging.LoggerAdapter):
    """Prefixes every message with the ``provider/model`` task it belongs to."""

    def process(self, msg, kwargs):
        return f"[{self.extra['task']}] {msg}", kwargs


def task_logger(logger: logging.Logger, provider: str, model: str) -> TaskLogAdapter:
    """Return an adapter tagging ``logger`` output with one generation task."""
    return TaskLogAdapter(logger, {"task": f"{provider}/{model}"})


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the docbench logger with console output and optional file sink.

    ``quiet`` keeps only warnings and errors (machine-readable runs); ``verbose``
    wins when both are set.
    """
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers so repeated CLI invocations in one process do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[docbench] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["TaskLogAdapter", "configure_logging", "get_logger", "task_logger"]
