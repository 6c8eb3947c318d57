import logging
from typing import Any, Dict

log = logging.getLogger("lifecycle")


def lifecycle(event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """
    Structured pipeline event. Fields become top-level keys of the JSON
    log line (see observability.logging_config.JsonFormatter).
    """
    payload: Dict[str, Any] = {"event": event, "component": "ingest"}
    payload.update(fields)
    log.log(level, event, extra=payload)
