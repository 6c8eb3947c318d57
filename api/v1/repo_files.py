# api/v1/repo_files.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, Field

from api.v1.deps import UriStr, get_pipeline, to_http_error
from connectors.ingress_http import parse_repo_files
from pipelines.engine import IngestionPipeline

router = APIRouter()


class RepoFilesRequest(BaseModel):
    repositoryUrl: UriStr = Field(..., description="GitHub repository URL")
    filePaths: str = Field(..., min_length=1, description="Comma-delimited string of file paths to include")


@router.post("/repo-files", response_class=Response)
async def repo_files(
    body: RepoFilesRequest,
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> Response:
    """
    Process selected files of a GitHub repository; returns the raw XML dump.
    """
    req = parse_repo_files(body.repositoryUrl, body.filePaths)
    try:
        result = await pipeline.run(req)
    except Exception as e:
        raise to_http_error(
            e,
            internal_detail="An error occurred while processing the repository files",
            route="repo-files",
        ) from e

    return Response(content=result.content, media_type="application/xml")
