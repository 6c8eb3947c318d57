from __future__ import annotations

from typing import Optional

from pipelines.spec import IngestionRequest, OutputMode, TransformOptions


def parse_repo_ingest(
    repository_url: str,
    *,
    compress: Optional[bool] = None,
    remove_comments: Optional[bool] = None,
    remove_empty_lines: Optional[bool] = None,
) -> IngestionRequest:
    """
    Full-text ingestion. Body schema is already enforced by FastAPI; this
    only maps wire names onto the pipeline request.
    """
    return IngestionRequest(
        repository_url=repository_url.strip(),
        output_mode=OutputMode.FULL_TEXT,
        options=TransformOptions(
            compress=compress,
            remove_comments=remove_comments,
            remove_empty_lines=remove_empty_lines,
        ),
    )


def parse_repo_files(repository_url: str, file_paths: str) -> IngestionRequest:
    """
    Selected-files ingestion. Transform options are pinned off and the
    comma-delimited file list is forwarded untouched.
    """
    return IngestionRequest(
        repository_url=repository_url.strip(),
        output_mode=OutputMode.SELECTED_FILES,
        selection=file_paths,
        options=TransformOptions(
            compress=False,
            remove_comments=False,
            remove_empty_lines=False,
        ),
    )
