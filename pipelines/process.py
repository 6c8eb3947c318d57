from __future__ import annotations

import asyncio
import logging
import os
import signal
import time
from typing import List, Optional, Sequence

from lifecycle.lifecycle_log import lifecycle
from pipelines.errors import ProcessFailure, ProcessTimeout, ScratchIOFailure
from pipelines.spec import ProcessResult

log = logging.getLogger(__name__)

_READ_CHUNK = 64 * 1024
# Tail of stderr carried into error messages
_STDERR_TAIL_CHARS = 2000


def prepare_output_file(output_path: str) -> None:
    """
    Create the destination empty and confirm it is writable, so scratch
    permission problems surface before a long tool run.
    """
    try:
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        with open(output_path, "w", encoding="utf-8"):
            pass
    except OSError as e:
        raise ScratchIOFailure(f"Cannot prepare output path: {e}") from e

    if not os.access(output_path, os.W_OK):
        raise ScratchIOFailure(f"Cannot prepare output path: {output_path} is not writable")


async def _drain(stream: Optional[asyncio.StreamReader], sink: Optional[List[str]], label: str) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            return
        text = chunk.decode("utf-8", errors="replace")
        log.debug("tool %s: %s", label, text.rstrip())
        if sink is not None:
            sink.append(text)


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        if os.name == "posix":
            # started in its own session: the group also holds npx/node children
            os.killpg(proc.pid, signal.SIGKILL)
        elif proc.returncode is None:
            proc.kill()
    except ProcessLookupError:
        pass


class ProcessOrchestrator:
    """
    Runs the external ingestion tool once per request.

    Arguments go through an argv vector (never a shell). Stderr is kept for
    diagnostics, stdout is drained and dropped; the output file is the
    result. The timeout is measured from spawn and always ends with the
    process killed and reaped.
    """

    def __init__(
        self,
        tool_command: Sequence[str],
        *,
        working_dir: Optional[str] = None,
        timeout_s: float = 300.0,
    ) -> None:
        if not tool_command:
            raise ValueError("tool_command must not be empty")
        self.tool_command = tuple(str(c) for c in tool_command)
        self.working_dir = working_dir
        self.timeout_s = float(timeout_s)

    def build_argv(self, repository_url: str, config_path: str) -> List[str]:
        return [
            *self.tool_command,
            "--remote",
            repository_url,
            "--config",
            config_path,
            "--verbose",
        ]

    async def run(self, repository_url: str, config_path: str, output_path: str) -> ProcessResult:
        await asyncio.to_thread(prepare_output_file, output_path)

        argv = self.build_argv(repository_url, config_path)
        lifecycle("ingest.tool.spawn", argv=argv, cwd=self.working_dir, timeout_s=self.timeout_s)

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.working_dir,
                start_new_session=(os.name == "posix"),
            )
        except OSError as e:
            log.error("tool spawn failed", extra={"argv": argv, "error": str(e)})
            raise ProcessFailure(f"Failed to execute ingestion tool: {e}") from e

        started = time.monotonic()
        stderr_parts: List[str] = []
        timed_out = False

        tasks = [
            asyncio.ensure_future(proc.wait()),
            asyncio.ensure_future(_drain(proc.stdout, None, "stdout")),
            asyncio.ensure_future(_drain(proc.stderr, stderr_parts, "stderr")),
        ]
        try:
            # asyncio.wait neither raises on timeout nor cancels what it waits on
            _, pending = await asyncio.wait(tasks, timeout=self.timeout_s)
            if pending:
                timed_out = True
                log.warning("tool timed out, killing", extra={"pid": proc.pid, "timeout_s": self.timeout_s})
        finally:
            # Also reached on caller cancellation: never leave the tool running
            if timed_out or proc.returncode is None:
                _kill(proc)
            for t in tasks[1:]:
                if not t.done():
                    t.cancel()
            # every task is collected here, so none is left with an unretrieved exception
            await asyncio.gather(*tasks, return_exceptions=True)

        for t in tasks[1:]:
            if not t.cancelled() and t.exception() is not None:
                raise t.exception()

        result = ProcessResult(
            exit_code=proc.returncode,
            stderr_text="".join(stderr_parts),
            timed_out=timed_out,
        )
        lifecycle(
            "ingest.tool.exited",
            exit_code=result.exit_code,
            timed_out=result.timed_out,
            duration_ms=int((time.monotonic() - started) * 1000),
        )
        return result


def check_process_result(result: ProcessResult, timeout_s: float) -> None:
    """Raise the classified failure for anything but a clean exit."""
    if result.timed_out:
        raise ProcessTimeout(timeout_s, stderr_text=result.stderr_text, exit_code=result.exit_code)
    if result.exit_code != 0:
        tail = result.stderr_text[-_STDERR_TAIL_CHARS:].strip()
        raise ProcessFailure(
            f"Ingestion tool exited with code {result.exit_code}: {tail}",
            exit_code=result.exit_code,
            stderr_text=result.stderr_text,
        )
