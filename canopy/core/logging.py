"""Logging setup with contextual dimensions.

``logger.with_context(team_id=...)`` returns a child logger whose records carry
the given dimensions, both as ``extra`` attributes and in the rendered line.
"""

import json
import logging
import sys
from typing import Any, Dict, MutableMapping, Tuple

from canopy.core.config import settings
from canopy.core.config.enums import Environment


class JSONFormatter(logging.Formatter):
    """Render records as one JSON object per line (non-local environments)."""

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record as JSON."""
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "context", {}))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that carries key/value dimensions."""

    def __init__(self, logger: logging.Logger, dimensions: Dict[str, Any]):
        """Wrap ``logger`` with a fixed set of dimensions."""
        super().__init__(logger, dimensions)
        self.dimensions = dimensions

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Attach dimensions to the record and prefix them onto the message."""
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**self.dimensions, **extra.get("context", {})}
        kwargs["extra"] = extra
        if self.dimensions and settings.ENVIRONMENT == Environment.LOCAL:
            dims = " ".join(f"{k}={v}" for k, v in self.dimensions.items())
            msg = f"[{dims}] {msg}"
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with the given dimensions merged in."""
        return ContextualLogger(self.logger, {**self.dimensions, **dimensions})


def _configure(name: str) -> logging.Logger:
    base = logging.getLogger(name)
    if not base.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if settings.ENVIRONMENT == Environment.LOCAL:
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
        else:
            handler.setFormatter(JSONFormatter())
        base.addHandler(handler)
    base.setLevel(settings.LOG_LEVEL.value)
    base.propagate = False
    return base


logger = ContextualLogger(_configure("canopy"), {})
