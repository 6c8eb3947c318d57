# api/v1/repo_ingest.py
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.v1.deps import UriStr, get_pipeline, to_http_error
from connectors.ingress_http import parse_repo_ingest
from pipelines.engine import IngestionPipeline

router = APIRouter()


class RepoIngestRequest(BaseModel):
    repository_url: UriStr = Field(..., description="GitHub repository URL")
    compress: bool = Field(default=False, description="Whether to compress the code to reduce token count")
    remove_comments: bool = Field(default=False, description="Whether to remove comments from the code")
    remove_empty_lines: bool = Field(default=False, description="Whether to remove empty lines from the code")


class RepoIngestData(BaseModel):
    outputPath: str
    content: str


class RepoIngestResponse(BaseModel):
    message: str
    data: RepoIngestData


@router.post("/repo-ingest", response_model=RepoIngestResponse)
async def repo_ingest(
    body: RepoIngestRequest,
    pipeline: IngestionPipeline = Depends(get_pipeline),
) -> Dict[str, Any]:
    """
    Process a GitHub repository URL into a single plain-text dump.
    """
    req = parse_repo_ingest(
        body.repository_url,
        compress=body.compress,
        remove_comments=body.remove_comments,
        remove_empty_lines=body.remove_empty_lines,
    )
    try:
        result = await pipeline.run(req)
    except Exception as e:
        raise to_http_error(
            e,
            internal_detail="An error occurred while processing the repository",
            route="repo-ingest",
        ) from e

    return {"message": "Repository successfully processed", "data": result.to_dict()}
