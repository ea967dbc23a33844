"""Git availability check."""
from __future__ import annotations

from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess

from wpclimate.wpc_modules import io_ops
from wpclimate.wpc_modules.errors import ClimateError, ErrorType

if TYPE_CHECKING:
    from wpclimate.wpc_modules.types import ShellResult

GIT_VERSION_COMMAND = "git --version"


def _not_installed(**context: object) -> IOFailure:
    return IOFailure(
        ClimateError(
            source="git.dependency",
            error_type=ErrorType.GIT_NOT_INSTALLED,
            message="Git is not installed or not on PATH",
            context=context,
        ),
    )


def check_git_installed() -> IOResult[None, ClimateError]:
    """Fail with GitNotInstalledError unless `git --version` succeeds."""
    def _check(result: ShellResult) -> IOResult[None, ClimateError]:
        if result.return_code != 0:
            return _not_installed(stderr=result.stderr.strip())
        return IOSuccess(None)

    return (
        io_ops.run_shell_command(GIT_VERSION_COMMAND)
        .lash(lambda error: _not_installed(cause=str(error)))
        .bind(_check)
    )
