# settings.py
import os
import shlex
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

DEFAULT_TOOL_COMMAND = ("npx", "--yes", "repomix")
DEFAULT_CONFIG_DIR = "/tmp/repomix-config"
DEFAULT_OUTPUT_DIR = "/tmp/repomix-output"
DEFAULT_TIMEOUT_S = 5 * 60.0
DEFAULT_ALLOWED_HOSTS = ("github.com",)

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class IngestSettings:
    """
    Everything the ingestion pipeline needs from its environment.

    tool_cwd is resolved once here and injected into the process
    orchestrator; nothing reads the process working directory later.
    """
    tool_command: Tuple[str, ...] = DEFAULT_TOOL_COMMAND
    tool_cwd: Optional[str] = None
    config_dir: str = DEFAULT_CONFIG_DIR
    output_dir: str = DEFAULT_OUTPUT_DIR
    timeout_s: float = DEFAULT_TIMEOUT_S
    allowed_hosts: Tuple[str, ...] = DEFAULT_ALLOWED_HOSTS
    retain_artifacts: bool = False


def _split_hosts(raw: str) -> Tuple[str, ...]:
    hosts = tuple(h.strip().lower() for h in raw.split(",") if h.strip())
    return hosts or DEFAULT_ALLOWED_HOSTS


def load_settings(env: Optional[Mapping[str, str]] = None) -> IngestSettings:
    env = os.environ if env is None else env

    raw_cmd = (env.get("INGEST_TOOL_COMMAND") or "").strip()
    tool_command = tuple(shlex.split(raw_cmd)) if raw_cmd else DEFAULT_TOOL_COMMAND

    try:
        timeout_s = float(env.get("INGEST_TIMEOUT_S") or DEFAULT_TIMEOUT_S)
    except ValueError:
        timeout_s = DEFAULT_TIMEOUT_S
    if timeout_s <= 0:
        timeout_s = DEFAULT_TIMEOUT_S

    return IngestSettings(
        tool_command=tool_command,
        tool_cwd=env.get("INGEST_TOOL_CWD") or None,
        config_dir=env.get("INGEST_CONFIG_DIR") or DEFAULT_CONFIG_DIR,
        output_dir=env.get("INGEST_OUTPUT_DIR") or DEFAULT_OUTPUT_DIR,
        timeout_s=timeout_s,
        allowed_hosts=_split_hosts(env.get("INGEST_ALLOWED_HOSTS") or ""),
        retain_artifacts=(env.get("INGEST_RETAIN_ARTIFACTS") or "").strip().lower() in _TRUTHY,
    )
