"""
Structured logging for stencil.

Every log call takes an event name followed by keyword fields:

    >>> logger = get_logger(__name__)
    >>> logger.warning("layout_not_found", layout="default", path="home.md")

Fields are rendered as ``key=value`` pairs after the event name and are
also attached to the ``LogRecord`` as ``record.event`` / ``record.fields``
so handlers (and ``caplog`` in tests) can assert on them directly.

Backed by the standard library ``logging`` module. The level for the
``stencil`` logger hierarchy can be set with ``configure_logging()`` or the
``STENCIL_LOG_LEVEL`` environment variable.

"""

from __future__ import annotations

import logging
import os
from typing import Any

__all__ = ["ROOT_LOGGER_NAME", "StencilLogger", "configure_logging", "get_logger"]

ROOT_LOGGER_NAME = "stencil"
LEVEL_ENV_VAR = "STENCIL_LOG_LEVEL"


def _format_fields(fields: dict[str, Any]) -> str:
    return " ".join(f"{key}={value!r}" for key, value in fields.items())


class StencilLogger:
    """
    Thin wrapper that turns ``event, **fields`` calls into log records.

    Thread Safety:
        Stateless apart from the wrapped ``logging.Logger``. Safe for
        concurrent use.

    """

    __slots__ = ("_logger",)

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def isEnabledFor(self, level: int) -> bool:  # noqa: N802 - mirrors logging API
        return self._logger.isEnabledFor(level)

    def _log(self, level: int, event: str, fields: dict[str, Any], exc_info: Any = None) -> None:
        if not self._logger.isEnabledFor(level):
            return
        message = f"{event} {_format_fields(fields)}" if fields else event
        self._logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={"event": event, "fields": fields},
            stacklevel=3,
        )

    def debug(self, event: str, **fields: Any) -> None:
        self._log(logging.DEBUG, event, fields)

    def info(self, event: str, **fields: Any) -> None:
        self._log(logging.INFO, event, fields)

    def warning(self, event: str, **fields: Any) -> None:
        self._log(logging.WARNING, event, fields)

    def error(self, event: str, *, exc_info: Any = None, **fields: Any) -> None:
        self._log(logging.ERROR, event, fields, exc_info=exc_info)


def get_logger(name: str) -> StencilLogger:
    """
    Return a structured logger for a module.

    Args:
        name: Usually ``__name__``. Names outside the ``stencil`` hierarchy
            are nested under it so one level setting controls everything.

    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return StencilLogger(logging.getLogger(name))


def configure_logging(level: int | str | None = None) -> None:
    """
    Set the level of the ``stencil`` logger hierarchy.

    Args:
        level: Level name or number. Falls back to ``STENCIL_LOG_LEVEL`` and
            then ``WARNING``.

    """
    if level is None:
        level = os.environ.get(LEVEL_ENV_VAR, "WARNING")
    if isinstance(level, str):
        level = level.upper()
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
