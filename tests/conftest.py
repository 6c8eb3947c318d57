"""
Shared fixtures for the ingestion test suite.

Every test runs the real pipeline against tests/fake_repomix.py, with
scratch directories under tmp_path so concurrent runs and cleanup can be
observed on disk.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app import create_app
from pipelines.engine import IngestionPipeline
from settings import IngestSettings

FAKE_TOOL = Path(__file__).parent / "fake_repomix.py"


@pytest.fixture
def fake_tool_command():
    return (sys.executable, str(FAKE_TOOL))


@pytest.fixture
def scratch_dirs(tmp_path):
    """(config_dir, output_dir); neither exists until something writes to it."""
    return tmp_path / "config", tmp_path / "output"


@pytest.fixture
def make_settings(fake_tool_command, scratch_dirs):
    config_dir, output_dir = scratch_dirs

    def _make(**overrides) -> IngestSettings:
        fields = {
            "tool_command": fake_tool_command,
            "config_dir": str(config_dir),
            "output_dir": str(output_dir),
            "timeout_s": 30.0,
        }
        fields.update(overrides)
        return IngestSettings(**fields)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def pipeline(settings):
    return IngestionPipeline(settings)


@pytest.fixture
def client(settings):
    app = create_app(settings, configure_log=False)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def list_files():
    """Names in a directory, or [] if it was never created."""

    def _list(path: Path):
        return sorted(p.name for p in path.iterdir()) if path.exists() else []

    return _list
