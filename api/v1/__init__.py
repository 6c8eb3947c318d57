# api/v1/__init__.py

from fastapi import APIRouter

# v1 router (mounted by app.py at /api/v1)
router = APIRouter()

from .repo_ingest import router as repo_ingest_router  # noqa: E402
from .repo_files import router as repo_files_router  # noqa: E402

router.include_router(repo_ingest_router, tags=["v1/repo-ingest"])
router.include_router(repo_files_router, tags=["v1/repo-files"])


__all__ = ["router"]
