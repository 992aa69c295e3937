"""Key=value logging for the profile assistant service.

Every line reads ``ts=... level=... logger=... msg=...`` followed by any
context fields passed to ``log_with_context`` (session ids, section names,
counts), so one chat turn can be followed with a grep on ``session_id``.
"""

import logging
import sys
from typing import Any

_CONTEXT_ATTR = "context_fields"


class StructuredFormatter(logging.Formatter):
    """Render a record and its context fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        fields: dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        fields.update(getattr(record, _CONTEXT_ATTR, {}))

        if record.exc_info:
            # Keep tracebacks on one line
            fields["exc"] = self.formatException(record.exc_info).replace("\n", " | ")

        return " ".join(f"{key}={value}" for key, value in fields.items())


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger writing key=value lines to stdout.

    DEBUG in dev, INFO everywhere else.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    from profile_assistant.core.config import get_settings

    logger.setLevel(logging.DEBUG if get_settings().is_dev else logging.INFO)
    return logger


def log_with_context(logger: logging.Logger, level: int, msg: str, **fields: Any) -> None:
    """Log ``msg`` with extra key=value fields (e.g. session_id=...)."""
    logger.log(level, msg, extra={_CONTEXT_ATTR: fields})
