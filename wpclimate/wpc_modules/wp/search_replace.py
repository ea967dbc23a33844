"""wp search-replace."""
from __future__ import annotations

import shlex
from typing import Annotated

from returns.io import IOResult

from wpclimate.wpc_modules.commands.types import Param, ParamKind
from wpclimate.wpc_modules.errors import ClimateError
from wpclimate.wpc_modules.types import CommandOutput
from wpclimate.wpc_modules.wp.base import WpCommand
from wpclimate.wpc_modules.wp.context import WpCliContext


class SearchReplaceCommand(WpCommand):
    """Replace every occurrence of a string in the site database."""

    requires_site = False

    def __init__(
        self,
        context: WpCliContext,
        old_value: Annotated[
            str,
            Param("oldValue", required=True, description="Text to search for"),
        ],
        new_value: Annotated[
            str,
            Param("newValue", required=True, description="Replacement text"),
        ],
        all_tables: Annotated[
            bool,
            Param(
                "allTables",
                ParamKind.BOOLEAN,
                default_value="false",
                description="Include every table, not only WordPress ones",
            ),
        ] = False,
        dry_run: Annotated[
            bool,
            Param(
                "dryRun",
                ParamKind.BOOLEAN,
                default_value="false",
                description="Report replacements without saving them",
            ),
        ] = False,
    ) -> None:
        super().__init__(context)
        if not old_value:
            msg = "oldValue must not be empty"
            raise ValueError(msg)
        self.old_value = old_value
        self.new_value = new_value
        self.all_tables = all_tables
        self.dry_run = dry_run

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        arguments = [
            "search-replace",
            shlex.quote(self.old_value),
            shlex.quote(self.new_value),
        ]
        if self.all_tables:
            arguments.append("--all-tables")
        if self.dry_run:
            arguments.append("--dry-run")
        return self.shell(self.wp_command_line(*arguments))
