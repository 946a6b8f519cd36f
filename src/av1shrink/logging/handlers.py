"""JSON log formatting for av1shrink."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes of a bare LogRecord, the ones Formatter adds, and the fields
# set by ConversionContextFilter. Anything else came in through extra=.
_RESERVED_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", logging.NOTSET, "", 0, "", (), None).__dict__
) | {"message", "asctime", "input_file", "input_tag"}


class JSONFormatter(logging.Formatter):
    """Format each record as a single-line JSON object.

    Keys are timestamp (UTC), level, message and logger. input_file is added
    while a conversion runs, context holds the ``extra=`` fields and
    exception holds a formatted traceback.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.name != "root":
            entry["logger"] = record.name

        input_file = getattr(record, "input_file", None)
        if input_file:
            entry["input_file"] = input_file

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["context"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
