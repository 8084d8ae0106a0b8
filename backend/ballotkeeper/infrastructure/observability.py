"""Structured Logging — JSON formatter and setup for audit-friendly service logs.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Ledger context (engine, caller, scope, operation, error_code, notification_kind)
      surfaced when present on the record
    - setup_logging is idempotent: building a second service replaces the handler
      it installed instead of stacking another one

Design Decisions:
    - JSONFormatter over third-party libs: one json.dumps per record, no extra dependency
    - Rejected operations log at WARNING, accepted mutations at INFO (see LedgerService)
"""

import logging
import json
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "engine", "caller", "scope", "operation", "error_code", "notification_kind",
)
_HANDLER_NAME = "ballotkeeper"


class JSONFormatter(logging.Formatter):
    """Render a log record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the BallotKeeper root handler, replacing one from an earlier call."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(engine)s] %(message)s",
            defaults={"engine": "-"},
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
