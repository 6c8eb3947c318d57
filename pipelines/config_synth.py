from __future__ import annotations

import json
import logging
import os
import uuid
from typing import Any, Dict

from lifecycle.lifecycle_log import lifecycle
from pipelines.errors import ScratchIOFailure
from pipelines.spec import ConfigArtifact, IngestionRequest, OutputMode

log = logging.getLogger(__name__)


def _unique_token() -> str:
    # uuid4 is drawn from os.urandom; safe across concurrent requests
    return uuid.uuid4().hex


def new_output_path(output_dir: str, mode: OutputMode = OutputMode.FULL_TEXT) -> str:
    ext = "xml" if mode == OutputMode.SELECTED_FILES else "txt"
    return os.path.join(output_dir, f"repomix-output-{_unique_token()}.{ext}")


def new_config_path(config_dir: str) -> str:
    return os.path.join(config_dir, f"repomix-config-{_unique_token()}.json")


def build_config_document(req: IngestionRequest, output_path: str) -> Dict[str, Any]:
    """
    Build the repomix config for one invocation.

    Fixed defaults first, then caller booleans only where they were given.
    In selected-files mode the raw selection string becomes the include
    filter as-is; the tool owns its interpretation.
    """
    selected = req.output_mode == OutputMode.SELECTED_FILES

    doc: Dict[str, Any] = {
        "output": {
            "filePath": output_path,
            "style": "xml" if selected else "plain",
            "parsableStyle": False,
            "compress": False,
            "fileSummary": True,
            "directoryStructure": True,
            "removeComments": False,
            "removeEmptyLines": False,
            "showLineNumbers": True,
            "copyToClipboard": False,
            "includeEmptyDirectories": False,
        },
        "include": ["**/*"],
        "ignore": {
            "useGitignore": True,
            "useDefaultPatterns": True,
            "customPatterns": [],
        },
        "security": {
            "enableSecurityCheck": False,
        },
    }

    opts = req.options
    if opts.compress is not None:
        doc["output"]["compress"] = bool(opts.compress)
    if opts.remove_comments is not None:
        doc["output"]["removeComments"] = bool(opts.remove_comments)
    if opts.remove_empty_lines is not None:
        doc["output"]["removeEmptyLines"] = bool(opts.remove_empty_lines)

    if selected and req.selection is not None:
        doc["include"] = [req.selection]

    return doc


def synthesize_config(req: IngestionRequest, output_path: str, config_dir: str) -> ConfigArtifact:
    """
    Write the config document to a fresh uniquely-named file under config_dir.
    Blocking; the pipeline runs it in a worker thread.
    """
    doc = build_config_document(req, output_path)
    path = new_config_path(config_dir)

    try:
        os.makedirs(config_dir, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(doc, f, indent=2)
    except OSError as e:
        log.error("config write failed", extra={"config_path": path, "error": str(e)})
        raise ScratchIOFailure(f"Cannot write ingestion config: {e}") from e

    lifecycle(
        "ingest.config.created",
        config_path=path,
        output_path=output_path,
        output_style=doc["output"]["style"],
    )
    return ConfigArtifact(path=path, output_path=output_path, document=doc)
