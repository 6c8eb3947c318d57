from __future__ import annotations

import asyncio
import logging
import os
import time
import uuid
from typing import List, Optional

from lifecycle.lifecycle_log import lifecycle
from observability.logging_config import bound_run
from pipelines.config_synth import new_output_path, synthesize_config
from pipelines.errors import IngestError, InvalidReference
from pipelines.materialize import materialize_result
from pipelines.process import ProcessOrchestrator, check_process_result
from pipelines.spec import ConfigArtifact, IngestionRequest, IngestionResult
from pipelines.validator import is_valid_repository_url
from settings import IngestSettings

log = logging.getLogger(__name__)


def _remove_quietly(paths: List[str]) -> None:
    for p in paths:
        try:
            os.remove(p)
        except FileNotFoundError:
            continue
        except OSError as e:
            log.warning("scratch cleanup failed", extra={"path": p, "error": str(e)})


class IngestionPipeline:
    """
    validate -> synthesize config -> run tool -> materialize output

    Stages run strictly in order and any failure aborts the run with a
    classified IngestError. Scratch artifacts are removed on every exit
    path unless settings.retain_artifacts is set.
    """

    def __init__(self, settings: IngestSettings, orchestrator: Optional[ProcessOrchestrator] = None) -> None:
        self.settings = settings
        self.orchestrator = orchestrator or ProcessOrchestrator(
            settings.tool_command,
            working_dir=settings.tool_cwd,
            timeout_s=settings.timeout_s,
        )

    async def run(self, req: IngestionRequest) -> IngestionResult:
        with bound_run(uuid.uuid4().hex):
            return await self._run(req)

    async def _run(self, req: IngestionRequest) -> IngestionResult:
        started = time.monotonic()

        if not is_valid_repository_url(req.repository_url, self.settings.allowed_hosts):
            lifecycle("ingest.rejected", repository_url=req.repository_url)
            raise InvalidReference("Invalid GitHub repository URL")

        lifecycle(
            "ingest.started",
            repository_url=req.repository_url,
            output_mode=req.output_mode.value,
        )

        output_path = new_output_path(self.settings.output_dir, req.output_mode)
        artifact: Optional[ConfigArtifact] = None

        try:
            artifact = await asyncio.to_thread(synthesize_config, req, output_path, self.settings.config_dir)

            result = await self.orchestrator.run(req.repository_url, artifact.path, output_path)
            check_process_result(result, self.orchestrator.timeout_s)

            out = await asyncio.to_thread(materialize_result, output_path)
        except IngestError as e:
            lifecycle(
                "ingest.failed",
                level=logging.WARNING,
                error_type=type(e).__name__,
                error=e.message,
                duration_ms=int((time.monotonic() - started) * 1000),
            )
            raise
        finally:
            scratch = [output_path] + ([artifact.path] if artifact else [])
            if self.settings.retain_artifacts:
                lifecycle("ingest.artifacts.retained", paths=scratch)
            else:
                await asyncio.to_thread(_remove_quietly, scratch)

        lifecycle(
            "ingest.completed",
            output_path=out.output_path,
            content_chars=len(out.content),
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return out
