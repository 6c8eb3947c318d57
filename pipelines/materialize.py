from __future__ import annotations

import logging
import os

from pipelines.errors import EmptyResult, ScratchIOFailure
from pipelines.spec import IngestionResult

log = logging.getLogger(__name__)


def materialize_result(output_path: str) -> IngestionResult:
    """
    Load the tool's output artifact.

    A zero-byte artifact is an EmptyResult even after a clean exit; the
    exit code alone does not prove there is anything to return.
    """
    try:
        size = os.stat(output_path).st_size
    except FileNotFoundError as e:
        raise ScratchIOFailure(f"Output file missing: {output_path}") from e
    except OSError as e:
        raise ScratchIOFailure(f"Output file issue: {e}") from e

    log.info("output artifact present", extra={"output_path": output_path, "size_bytes": size})

    if size == 0:
        raise EmptyResult("Ingestion tool generated an empty output file")

    try:
        with open(output_path, "r", encoding="utf-8", errors="replace") as f:
            content = f.read()
    except OSError as e:
        raise ScratchIOFailure(f"Cannot read output file: {e}") from e

    return IngestionResult(output_path=output_path, content=content)
