"""JSON log formatting.

One JSON object per line. Records emitted inside a transform carry its
source and output under "transform"; anything passed through extra= lands
under "extra".
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord has, plus the fields TransformContextFilter adds
_RESERVED: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.NOTSET, "", 0, "", None, None))
) | {"message", "asctime", "source", "output", "transform_tag"}


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects.

    Keys: time (ISO-8601 UTC), level, logger, message, and when present
    transform, extra and exception.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "time": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        transform = {
            key: str(getattr(record, key))
            for key in ("source", "output")
            if getattr(record, key, None)
        }
        if transform:
            entry["transform"] = transform

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
