"""Dependency checks that gate WP commands.

Each check runs a harmless version command through io_ops and
turns a nonzero exit, or a process that could not start, into a
typed ClimateError.
"""
from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess

from wpclimate.wpc_modules import io_ops
from wpclimate.wpc_modules.errors import ClimateError, ErrorType

if TYPE_CHECKING:
    from collections.abc import Callable

    from wpclimate.wpc_modules.types import ShellResult
    from wpclimate.wpc_modules.wp.context import WpCliContext


def _failure(error_type: str, message: str, **context: object) -> IOFailure:
    return IOFailure(
        ClimateError(
            source="wp.dependency",
            error_type=error_type,
            message=message,
            context=context,
        ),
    )


def _probe(
    command: str,
    error_type: str,
    message: str,
    cwd: str | None = None,
) -> IOResult[None, ClimateError]:
    def _as_typed(error: ClimateError) -> IOResult[ShellResult, ClimateError]:
        return _failure(error_type, message, command=command, cause=str(error))

    def _check(result: ShellResult) -> IOResult[None, ClimateError]:
        if result.return_code != 0:
            return _failure(
                error_type,
                message,
                command=command,
                stderr=result.stderr.strip(),
            )
        return IOSuccess(None)

    return (
        io_ops.run_shell_command(command, cwd=cwd)
        .lash(_as_typed)
        .bind(_check)
    )


def _then(
    check: Callable[[], IOResult[None, ClimateError]],
) -> Callable[[None], IOResult[None, ClimateError]]:
    return lambda _: check()


def php_executable(context: WpCliContext) -> str:
    return shlex.quote(context.model.php)


def wp_executable(context: WpCliContext) -> str:
    return f"{php_executable(context)} {shlex.quote(context.model.wp_cli)}"


def check_php_installed(context: WpCliContext) -> IOResult[None, ClimateError]:
    """Fail with PHPNotInstalledError unless php runs."""
    if not context.model.php.strip():
        return _failure(ErrorType.PHP_NOT_INSTALLED, "PHP path is not configured")
    return _probe(
        f"{php_executable(context)} --version",
        ErrorType.PHP_NOT_INSTALLED,
        "PHP is not installed or not executable",
    )


def check_wp_cli_installed(context: WpCliContext) -> IOResult[None, ClimateError]:
    """Fail with WPCliNotInstalledError unless php can run wp-cli."""
    def _wp_cli() -> IOResult[None, ClimateError]:
        if not context.model.wp_cli.strip():
            return _failure(
                ErrorType.WPCLI_NOT_INSTALLED,
                "WP-CLI path is not configured",
            )
        return _probe(
            f"{wp_executable(context)} --version",
            ErrorType.WPCLI_NOT_INSTALLED,
            "WP-CLI is not installed or not executable",
        )

    return check_php_installed(context).bind(_then(_wp_cli))


def check_wordpress_directory(
    context: WpCliContext,
) -> IOResult[None, ClimateError]:
    """Fail unless the working directory holds a WordPress install."""
    directory = str(context.working_directory)
    return check_wp_cli_installed(context).bind(
        _then(
            lambda: _probe(
                f"{wp_executable(context)} core version"
                f" --path={shlex.quote(directory)}",
                ErrorType.NOT_A_WORDPRESS_DIRECTORY,
                f"Not a WordPress directory: {directory}",
                cwd=directory,
            ),
        ),
    )
