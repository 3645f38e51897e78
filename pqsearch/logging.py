"""Logging setup for pqsearch CLIs and library users."""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

LogFormat = Literal["text", "json"]
LogDestination = Literal["auto", "stdout", "stderr"]

LOG_LEVEL_ENV_VAR = "PQSEARCH_LOG_LEVEL"
MAX_STATEMENT_CHARS = 2_000

_STANDARD_RECORD_KEYS = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object, including any `extra` fields."""

    def __init__(self, *, max_statement_chars: int = MAX_STATEMENT_CHARS) -> None:
        super().__init__()
        self.max_statement_chars = max_statement_chars

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _STANDARD_RECORD_KEYS or key.startswith("_"):
                continue
            payload[key] = value
        statement = payload.get("statement")
        if isinstance(statement, str) and len(statement) > self.max_statement_chars:
            payload["statement"] = statement[: self.max_statement_chars] + "..."
            payload["statement_truncated"] = True
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, default=str)


@dataclass(slots=True)
class _LevelRangeFilter(logging.Filter):
    min_level: int | None = None
    max_level: int | None = None

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if self.min_level is not None and record.levelno < self.min_level:
            return False
        return self.max_level is None or record.levelno <= self.max_level


def configure_logging(
    *,
    level: str | int | None = None,
    fmt: LogFormat = "text",
    destination: LogDestination = "auto",
) -> logging.Logger:
    """Install handlers on the root logger.

    When `level` is omitted, `PQSEARCH_LOG_LEVEL` is consulted before
    falling back to INFO.
    """

    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO")
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(resolve_level(level))

    formatter = _select_formatter(fmt)
    for handler in _build_handlers(destination):
        handler.setLevel(logging.NOTSET)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    logging.captureWarnings(True)
    return root


def resolve_level(value: str | int) -> int:
    if isinstance(value, int):
        return value
    resolved = logging.getLevelName(value.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {value}")
    return resolved


def _select_formatter(fmt: LogFormat) -> logging.Formatter:
    if fmt == "json":
        return JsonFormatter()
    return logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")


def _build_handlers(destination: LogDestination) -> Iterable[logging.Handler]:
    if destination != "auto":
        stream = sys.stdout if destination == "stdout" else sys.stderr
        return (logging.StreamHandler(stream),)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.addFilter(_LevelRangeFilter(max_level=logging.INFO))
    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.addFilter(_LevelRangeFilter(min_level=logging.WARNING))
    return (stdout_handler, stderr_handler)


__all__ = ["JsonFormatter", "LogDestination", "LogFormat", "configure_logging", "resolve_level"]
