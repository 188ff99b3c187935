"""Mapping of a finished invocation to its process exit code."""

from __future__ import annotations

from mbox.domain.errors import USER_ERROR_CODE, CommandRuntimeError, UserError
from mbox.domain.launcher import LAUNCH_FAILED

SUCCESS = 0
DEV_ROOT_MISSING = 253
ELEVATED_INVOCATION = 254


def compute_exit_code(pending_code: int, error: BaseException | None = None, *, help_requested: bool = False) -> int:
    """A non-zero pending code always wins; otherwise the error decides.

    A generic error without a carried code maps to 0, so callers must check
    whether an error was raised rather than rely on the code alone.
    """

    if help_requested:
        error = None
    if pending_code != 0:
        return pending_code
    if error is None:
        return SUCCESS
    if isinstance(error, CommandRuntimeError):
        return error.code
    if isinstance(error, UserError):
        return USER_ERROR_CODE
    code = getattr(error, "code", None)
    return code if isinstance(code, int) else 0


__all__ = [
    "DEV_ROOT_MISSING",
    "ELEVATED_INVOCATION",
    "LAUNCH_FAILED",
    "SUCCESS",
    "compute_exit_code",
]
