# api/v1/deps.py
from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from pydantic import AfterValidator, AnyUrl, TypeAdapter, ValidationError
from typing import Annotated

from pipelines.engine import IngestionPipeline
from pipelines.errors import IngestError

log = logging.getLogger(__name__)

_ANY_URL = TypeAdapter(AnyUrl)


def _uri_shape(v: str) -> str:
    # Check only; the raw string (not pydantic's normalized URL) goes downstream
    try:
        _ANY_URL.validate_python(v)
    except ValidationError as e:
        raise ValueError(f"must be a valid uri ({e.errors()[0]['msg']})") from e
    return v


# Body-level URI shape. Host policy lives in the pipeline's validator.
UriStr = Annotated[str, AfterValidator(_uri_shape)]


def get_pipeline(request: Request) -> IngestionPipeline:
    """The app builds one pipeline at startup and parks it on app.state."""
    return request.app.state.pipeline


def to_http_error(e: Exception, *, internal_detail: str, route: str) -> HTTPException:
    """
    Caller-correctable failures keep their message (400). Anything else is
    logged in full and surfaced as an opaque 500.
    """
    if isinstance(e, IngestError) and e.caller_error:
        log.info("request rejected", extra={"route": route, "error": e.message})
        return HTTPException(status_code=400, detail=e.message)

    log.error(
        "ingestion failed",
        extra={"route": route, "error_type": type(e).__name__, "error": str(e)},
        exc_info=not isinstance(e, IngestError),
    )
    return HTTPException(status_code=500, detail=internal_detail)
