import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from api.v1 import router as v1_router
from observability.logging_config import configure_logging
from pipelines.engine import IngestionPipeline
from settings import IngestSettings, load_settings

log = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(x) for x in err.get("loc", ()) if x != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


def create_app(
    settings: Optional[IngestSettings] = None,
    *,
    pipeline: Optional[IngestionPipeline] = None,
    configure_log: bool = True,
) -> FastAPI:
    """
    Build the API. Settings are read from the environment once, here,
    and handed down; nothing below reads os.environ per request.
    """
    if configure_log:
        configure_logging()

    settings = settings or load_settings()

    app = FastAPI(title="Repository Ingest API")
    app.state.settings = settings
    app.state.pipeline = pipeline or IngestionPipeline(settings)

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        msg = _validation_message(exc)
        log.info("payload rejected", extra={"path": request.url.path, "error": msg})
        return JSONResponse(status_code=400, content={"detail": f"Validation error: {msg}"})

    @app.get("/healthz", response_class=PlainTextResponse)
    def healthz() -> str:
        """
        Simple health check used by the platform.
        """
        return "ok"

    app.include_router(v1_router, prefix="/api/v1")

    log.info(
        "app configured",
        extra={
            "tool_command": list(settings.tool_command),
            "tool_cwd": settings.tool_cwd,
            "config_dir": settings.config_dir,
            "output_dir": settings.output_dir,
            "timeout_s": settings.timeout_s,
            "allowed_hosts": list(settings.allowed_hosts),
            "retain_artifacts": settings.retain_artifacts,
        },
    )
    return app


app = create_app()
