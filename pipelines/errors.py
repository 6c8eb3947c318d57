from __future__ import annotations

from typing import Optional


class IngestError(Exception):
    """
    Base for every classified pipeline failure.

    `caller_error` tells the HTTP layer whether the caller can fix it
    (400) or whether it is an internal fault (opaque 500).
    """
    caller_error = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidReference(IngestError):
    caller_error = True


class ScratchIOFailure(IngestError):
    pass


class ProcessFailure(IngestError):
    def __init__(self, message: str, *, exit_code: Optional[int] = None, stderr_text: str = "") -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr_text = stderr_text


class ProcessTimeout(ProcessFailure):
    def __init__(self, timeout_s: float, *, stderr_text: str = "", exit_code: Optional[int] = None) -> None:
        super().__init__(
            f"Ingestion tool timed out after {timeout_s:g}s",
            exit_code=exit_code,
            stderr_text=stderr_text,
        )
        self.timeout_s = timeout_s


class EmptyResult(IngestError):
    pass
