from __future__ import annotations

from typing import Iterable, Optional

SOURCE_MAX_BYTES = 128 * 1024
STDIN_MAX_BYTES = 32 * 1024


class QuotaError(ValueError):
    error_code = "E_PAYLOAD_TOO_LARGE"


def enforce_source(source: str) -> None:
    if len(source.encode()) > SOURCE_MAX_BYTES:
        raise QuotaError("payload_too_large: code exceeds 128KiB limit")


def enforce_stdin(stdin: Optional[str]) -> None:
    if stdin and len(stdin.encode()) > STDIN_MAX_BYTES:
        raise QuotaError("payload_too_large: test case input exceeds 32KiB limit")


def enforce_job_payload(source: str, stdins: Iterable[Optional[str]]) -> None:
    """Reject a run whose combined source or any test case input is over quota."""
    enforce_source(source)
    for stdin in stdins:
        enforce_stdin(stdin)


__all__ = ["QuotaError", "enforce_source", "enforce_stdin", "enforce_job_payload"]
