"""Base class for Git commands."""
from __future__ import annotations

import logging
import shlex
from collections.abc import Iterable

from returns.io import IOFailure, IOResult, IOSuccess

from wpclimate.wpc_modules import io_ops
from wpclimate.wpc_modules.commands.base import BaseCommand
from wpclimate.wpc_modules.errors import ClimateError, ErrorType
from wpclimate.wpc_modules.git.context import GitContext
from wpclimate.wpc_modules.git.dependency import check_git_installed
from wpclimate.wpc_modules.types import CommandOutput

logger = logging.getLogger(__name__)

# (command line, extra environment)
RemoteCommand = tuple[str, dict[str, str] | None]


def quote_all(values: Iterable[str]) -> list[str]:
    return [shlex.quote(v) for v in values]


def as_list(value: object) -> list[str]:
    """Normalize a PATH parameter holding one or many paths."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if str(v).strip()]
    text = str(value).strip()
    return [text] if text else []


class GitCommand(BaseCommand):
    """Runs git inside the repository directory."""

    context: GitContext

    def __init__(self, context: GitContext) -> None:
        super().__init__(context)

    def check_preconditions(self) -> IOResult[None, ClimateError]:
        return check_git_installed()

    def shell(
        self,
        command_line: str,
        env: dict[str, str] | None = None,
    ) -> IOResult[CommandOutput, ClimateError]:
        return io_ops.run_shell_command(
            command_line,
            env=env,
            cwd=str(self.context.working_directory),
        ).map(CommandOutput.from_shell_result)

    def authenticated(
        self,
        operation: str,
        *params: str,
        url: str | None = None,
    ) -> IOResult[RemoteCommand, ClimateError]:
        """Command line and environment from the configured credential."""
        credential = self.context.credential
        if credential is None:
            return IOFailure(
                ClimateError(
                    source="git.base",
                    error_type=ErrorType.CONFIGURATION_MISSING,
                    message="No Git credentials configured",
                    context={"operation": operation},
                ),
            )
        return credential.get_git_command(operation, *params, url=url).bind(
            lambda command_line: credential.get_git_environment().map(
                lambda env: (command_line, env),
            ),
        )

    def with_fallback(
        self,
        remote: IOResult[RemoteCommand, ClimateError],
        fallback: str,
    ) -> IOResult[RemoteCommand, ClimateError]:
        """Replace a missing-credential failure with a plain command line."""
        def _plain(error: ClimateError) -> IOResult[RemoteCommand, ClimateError]:
            if error.error_type != ErrorType.CONFIGURATION_MISSING:
                return IOFailure(error)
            logger.warning(
                "%s. Running without credentials; authentication may fail.",
                error.message,
            )
            return IOSuccess((fallback, None))

        return remote.lash(_plain)

    def run_remote(
        self,
        remote: IOResult[RemoteCommand, ClimateError],
    ) -> IOResult[CommandOutput, ClimateError]:
        return remote.bind(lambda pair: self.shell(pair[0], env=pair[1]))
