"""
Log output for the UPH tracker.

Goal and work-log events pass their ids through `extra=`; both formatters
surface those fields so a line can be traced back to the row it touched.
"""
import json
import logging
import sys
from datetime import datetime, timezone

LOG_FIELDS = ("work_log_id", "target_id", "met_at")
QUIET_LOGGERS = ("uvicorn.access", "apscheduler.executors.default", "httpx")


def log_fields(record: logging.LogRecord) -> dict:
    return {key: getattr(record, key) for key in LOG_FIELDS if getattr(record, key, None) is not None}


class JSONFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
            **log_fields(record),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PlainFormatter(logging.Formatter):
    """`time [logger] LEVEL: message` with any tracked ids appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s [%(name)s] %(levelname)s: %(message)s")

    def format(self, record):
        line = super().format(record)
        fields = log_fields(record)
        if fields:
            line += " | " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


def setup_logging(level: str = "INFO", json_output: bool = False) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter() if json_output else PlainFormatter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers = [handler]
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
