"""Base class for WP-CLI commands."""
from __future__ import annotations

import os
import shlex
from pathlib import Path
from typing import ClassVar

from returns.io import IOResult

from wpclimate.wpc_modules import io_ops
from wpclimate.wpc_modules.commands.base import BaseCommand
from wpclimate.wpc_modules.errors import ClimateError
from wpclimate.wpc_modules.types import CommandOutput
from wpclimate.wpc_modules.wp.context import WpCliContext
from wpclimate.wpc_modules.wp.dependency import (
    check_wordpress_directory,
    check_wp_cli_installed,
    wp_executable,
)


class WpCommand(BaseCommand):
    """Runs `php wp --path=<site> ...` inside the site directory.

    Set requires_site = False for commands that only need
    wp-cli itself to be runnable.
    """

    context: WpCliContext
    requires_site: ClassVar[bool] = True

    def __init__(self, context: WpCliContext) -> None:
        super().__init__(context)

    def check_preconditions(self) -> IOResult[None, ClimateError]:
        if self.requires_site:
            return check_wordpress_directory(self.context)
        return check_wp_cli_installed(self.context)

    def wp_command_line(self, *arguments: str) -> str:
        """Build the full wp-cli command line. Arguments must be pre-quoted."""
        site = shlex.quote(str(self.context.working_directory))
        return " ".join([wp_executable(self.context), f"--path={site}", *arguments])

    def mysql_environment(self) -> dict[str, str] | None:
        """PATH with the configured MySQL binary directory prepended."""
        mysql = self.context.model.mysql
        if not mysql:
            return None
        bin_dir = Path(mysql).parent
        return {"PATH": f"{bin_dir}{os.pathsep}{os.environ.get('PATH', '')}"}

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


class FixedWpCommand(WpCommand):
    """A WP command whose arguments never vary."""

    arguments: ClassVar[tuple[str, ...]] = ()
    uses_mysql: ClassVar[bool] = False

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        env = self.mysql_environment() if self.uses_mysql else None
        return self.shell(self.wp_command_line(*self.arguments), env=env)
