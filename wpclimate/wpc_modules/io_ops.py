"""I/O boundary module -- ALL external I/O goes through here.

This is the single mock point for the test suite. Commands, the
store and the config layer never touch subprocess or the
filesystem directly; they call io_ops functions.
"""
from __future__ import annotations

import os
import subprocess
import sys
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess

from wpclimate.wpc_modules.errors import ClimateError
from wpclimate.wpc_modules.types import ShellResult

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path


def read_file(path: Path) -> IOResult[str, ClimateError]:
    """Read file contents. Returns IOResult, never raises."""
    try:
        return IOSuccess(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return IOFailure(
            ClimateError(
                source="io_ops.read_file",
                error_type="FileNotFoundError",
                message=f"File not found: {path}",
                context={"path": str(path)},
            ),
        )
    except PermissionError:
        return IOFailure(
            ClimateError(
                source="io_ops.read_file",
                error_type="PermissionError",
                message=f"Permission denied: {path}",
                context={"path": str(path)},
            ),
        )
    except (OSError, UnicodeDecodeError) as exc:
        return IOFailure(
            ClimateError(
                source="io_ops.read_file",
                error_type=type(exc).__name__,
                message=f"Error reading {path}: {exc}",
                context={"path": str(path)},
            ),
        )


def write_file(
    path: Path,
    content: str,
) -> IOResult[Path, ClimateError]:
    """Write content to path, creating parent directories.

    Returns IOSuccess(path) on success.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except PermissionError:
        return IOFailure(
            ClimateError(
                source="io_ops.write_file",
                error_type="PermissionError",
                message=f"Permission denied: {path}",
                context={"path": str(path)},
            ),
        )
    except OSError as exc:
        return IOFailure(
            ClimateError(
                source="io_ops.write_file",
                error_type=type(exc).__name__,
                message=f"OS error writing {path}: {exc}",
                context={"path": str(path)},
            ),
        )
    return IOSuccess(path)


def delete_file(path: Path) -> IOResult[None, ClimateError]:
    """Remove a single file. Returns IOResult, never raises."""
    try:
        path.unlink()
    except FileNotFoundError:
        return IOFailure(
            ClimateError(
                source="io_ops.delete_file",
                error_type="FileNotFoundError",
                message=f"File not found: {path}",
                context={"path": str(path)},
            ),
        )
    except OSError as exc:
        return IOFailure(
            ClimateError(
                source="io_ops.delete_file",
                error_type=type(exc).__name__,
                message=f"OS error deleting {path}: {exc}",
                context={"path": str(path)},
            ),
        )
    return IOSuccess(None)


def ensure_directory(path: Path) -> IOResult[Path, ClimateError]:
    """Create directory (and parents) if missing."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return IOFailure(
            ClimateError(
                source="io_ops.ensure_directory",
                error_type=type(exc).__name__,
                message=f"Cannot create directory {path}: {exc}",
                context={"path": str(path)},
            ),
        )
    return IOSuccess(path)


def list_files(
    directory: Path,
    suffix: str,
) -> IOResult[list[Path], ClimateError]:
    """List regular files in directory ending with suffix, sorted.

    Non-recursive. A missing directory is an IOFailure.
    """
    if not directory.is_dir():
        return IOFailure(
            ClimateError(
                source="io_ops.list_files",
                error_type="NotADirectoryError",
                message=f"Not a directory: {directory}",
                context={"directory": str(directory)},
            ),
        )
    try:
        files = sorted(
            entry
            for entry in directory.iterdir()
            if entry.is_file() and entry.name.endswith(suffix)
        )
    except OSError as exc:
        return IOFailure(
            ClimateError(
                source="io_ops.list_files",
                error_type=type(exc).__name__,
                message=f"Error listing {directory}: {exc}",
                context={"directory": str(directory)},
            ),
        )
    return IOSuccess(files)


def run_shell_command(
    command: str,
    *,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    timeout: int | None = None,
) -> IOResult[ShellResult, ClimateError]:
    """Execute shell command. Returns IOResult, never raises.

    env entries are layered on top of the current process
    environment. Nonzero exit codes are valid results, not
    errors; the calling command decides what they mean. Output
    that is not valid UTF-8 is decoded with replacement characters.
    """
    full_env = {**os.environ, **env} if env else None
    try:
        result = subprocess.run(  # noqa: S602
            command,
            shell=True,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            cwd=cwd,
            env=full_env,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return IOFailure(
            ClimateError(
                source="io_ops.run_shell_command",
                error_type="TimeoutError",
                message=f"Command timed out after {timeout}s: {command}",
                context={"command": command, "timeout": timeout},
            ),
        )
    except FileNotFoundError:
        return IOFailure(
            ClimateError(
                source="io_ops.run_shell_command",
                error_type="FileNotFoundError",
                message=f"Command or directory not found: {command}",
                context={"command": command, "cwd": cwd},
            ),
        )
    except OSError as exc:
        return IOFailure(
            ClimateError(
                source="io_ops.run_shell_command",
                error_type=type(exc).__name__,
                message=f"OS error running command: {exc}",
                context={"command": command},
            ),
        )
    else:
        return IOSuccess(
            ShellResult(
                return_code=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
                command=command,
            ),
        )


def write_stderr(
    message: str,
) -> IOResult[None, ClimateError]:
    """Write a line to stderr for the CLI user.

    Returns IOSuccess(None) or IOFailure on error.
    """
    try:
        sys.stderr.write(message if message.endswith("\n") else message + "\n")
    except OSError as exc:
        return IOFailure(
            ClimateError(
                source="io_ops.write_stderr",
                error_type="StderrWriteError",
                message=f"Failed to write to stderr: {exc}",
                context={"original_message": message},
            ),
        )
    return IOSuccess(None)
