"""Structured, append-only api log.

The http client writes one entry per request to the ``screeps_client.api`` logger. This module turns that logger into a json lines file,
with the file writes moved to a listener thread so logging never holds up a request.
"""

from __future__ import annotations

import json
import logging
import queue
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import Optional, Union

__all__ = ["JSONFormatter", "configure_api_log", "API_LOGGER_NAME"]

API_LOGGER_NAME = "screeps_client.api"
DEFAULT_LOG_FILE = "api.log"

_EXTRA_FIELDS = ("request", "data")


class JSONFormatter(logging.Formatter):
    """Render records as single line json with a timestamp, level, message and the request fields passed through ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "message": record.getMessage(),
        }
        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                payload[field] = getattr(record, field)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=repr)


def configure_api_log(
    filename: Union[str, Path] = DEFAULT_LOG_FILE,
    *,
    level: int = logging.INFO,
    propagate: bool = False,
    handler: Optional[logging.Handler] = None,
) -> QueueListener:
    """Attach the json sink to the api logger and start its listener. Call ``stop()`` on the result at shutdown to flush it."""

    if handler is None:
        handler = logging.FileHandler(str(filename), encoding="utf-8")
    handler.setFormatter(JSONFormatter())

    records: "queue.Queue[logging.LogRecord]" = queue.Queue(-1)
    listener = QueueListener(records, handler, respect_handler_level=True)

    logger = logging.getLogger(API_LOGGER_NAME)
    for existing in list(logger.handlers):
        if getattr(existing, "_screeps_api_managed", False):
            logger.removeHandler(existing)
    queue_handler = QueueHandler(records)
    queue_handler._screeps_api_managed = True  # type: ignore[attr-defined]
    logger.addHandler(queue_handler)
    logger.setLevel(level)
    logger.propagate = propagate

    listener.start()
    return listener
