"""Shared value types for process execution results."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ShellResult:
    """Result of a shell command execution."""

    return_code: int
    stdout: str
    stderr: str
    command: str


@dataclass(frozen=True)
class CommandOutput:
    """What a command reports back to the executor.

    successful is derived from the exit code, not from stderr:
    git and wp-cli both write progress and notices to stderr.
    """

    successful: bool
    std_out_text: str = ""
    error_text: str = ""
    command_line: str = ""

    @classmethod
    def from_shell_result(cls, result: ShellResult) -> CommandOutput:
        """Build an output from a finished process."""
        return cls(
            successful=result.return_code == 0,
            std_out_text=result.stdout,
            error_text=result.stderr,
            command_line=result.command,
        )
