from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class OutputMode(str, Enum):
    FULL_TEXT = "full-text"
    SELECTED_FILES = "selected-files"


@dataclass(frozen=True)
class TransformOptions:
    """
    Caller knobs forwarded to the ingestion tool.
    None means "leave the config default alone".
    """
    compress: Optional[bool] = None
    remove_comments: Optional[bool] = None
    remove_empty_lines: Optional[bool] = None


@dataclass(frozen=True)
class IngestionRequest:
    """
    One accepted ingestion request. Owned by a single pipeline run.

    `selection` is the raw comma-delimited path list and is only
    meaningful in selected-files mode.
    """
    repository_url: str
    output_mode: OutputMode = OutputMode.FULL_TEXT
    selection: Optional[str] = None
    options: TransformOptions = field(default_factory=TransformOptions)


@dataclass(frozen=True)
class ConfigArtifact:
    """
    Handle for a synthesized per-invocation config written to scratch.
    """
    path: str
    output_path: str
    document: Dict[str, Any]


@dataclass(frozen=True)
class ProcessResult:
    exit_code: Optional[int]
    stderr_text: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


@dataclass(frozen=True)
class IngestionResult:
    output_path: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"outputPath": self.output_path, "content": self.content}
