import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

SERVICE = os.getenv("SERVICE_NAME", "repo-ingest-api")
ENV = os.getenv("ENV", "dev")

# Set for the duration of one pipeline run. Worker threads started with
# asyncio.to_thread inherit it, so every line a run produces carries it.
_RUN_ID: ContextVar[Optional[str]] = ContextVar("ingest_run_id", default=None)

# Standard LogRecord attributes; everything else on a record came from `extra=`
_RECORD_KEYS = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "taskName",
    "message",
))

# Correlation keys, emitted right after the core keys when present
_CONTEXT_KEYS = ("run_id", "event", "component")


@contextmanager
def bound_run(run_id: str) -> Iterator[str]:
    token = _RUN_ID.set(run_id)
    try:
        yield run_id
    finally:
        _RUN_ID.reset(token)


def current_run_id() -> Optional[str]:
    return _RUN_ID.get()


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line:
      ts, level, service, env, logger, msg,
      then run_id / event / component (lifecycle convention),
      then any other `extra=` fields.
    """

    def format(self, record: logging.LogRecord) -> str:
        base: Dict[str, Any] = {
            "ts": _utc_iso(),
            "level": record.levelname,
            "service": SERVICE,
            "env": ENV,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        fields = {
            k: v for k, v in record.__dict__.items()
            if not k.startswith("_") and k not in _RECORD_KEYS
        }
        if "run_id" not in fields and current_run_id() is not None:
            fields["run_id"] = current_run_id()

        for k in _CONTEXT_KEYS:
            if k in fields:
                base[k] = fields.pop(k)
        for k, v in fields.items():
            base.setdefault(k, v)

        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)

        # str() fallback: tool argv, paths and the like must never break logging
        return json.dumps(base, ensure_ascii=False, default=str)


def configure_logging(level: Optional[str] = None) -> None:
    lvl = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    root = logging.getLogger()
    root.setLevel(lvl)

    # Clear default handlers (uvicorn can double-log otherwise)
    root.handlers.clear()

    h = logging.StreamHandler(sys.stdout)
    h.setLevel(lvl)
    h.setFormatter(JsonFormatter())
    root.addHandler(h)

    logging.getLogger("uvicorn.access").setLevel(os.getenv("UVICORN_ACCESS_LEVEL", "WARNING"))
    logging.getLogger("uvicorn.error").setLevel(lvl)
