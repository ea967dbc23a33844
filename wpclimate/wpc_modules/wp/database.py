"""Database commands: check, repair, export and import."""
from __future__ import annotations

import shlex
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated

from returns.io import IOResult

from wpclimate.wpc_modules.commands.base import bag_value
from wpclimate.wpc_modules.commands.types import Param, ParamKind
from wpclimate.wpc_modules.errors import ClimateError
from wpclimate.wpc_modules.types import CommandOutput
from wpclimate.wpc_modules.wp.base import FixedWpCommand, WpCommand
from wpclimate.wpc_modules.wp.context import WpCliContext

_EXPORT_FILE = Param(
    "fileName",
    ParamKind.PATH,
    required=True,
    description="Name of the SQL dump written to the dump directory",
)
_IMPORT_FILE = Param(
    "fileName",
    ParamKind.PATH,
    required=True,
    description="SQL dump to import; relative names resolve in the dump directory",
)


class CheckDbCommand(FixedWpCommand):
    arguments = ("db", "check")
    uses_mysql = True


class RepairDbCommand(FixedWpCommand):
    arguments = ("db", "repair")
    uses_mysql = True


def _file_name(params: Mapping[str, object] | None, param: Param) -> str:
    value = bag_value(params, param)
    if isinstance(value, list):
        value = value[0] if len(value) == 1 else ""
    name = str(value or "").strip()
    if not name:
        msg = f"{param.name} must name a single file"
        raise ValueError(msg)
    return name


class ExportDbCommand(WpCommand):
    """Dump the site database into the dump directory."""

    file_name: Annotated[str, _EXPORT_FILE]

    def __init__(
        self,
        context: WpCliContext,
        params: Mapping[str, object],
    ) -> None:
        super().__init__(context)
        self.file_name = _file_name(params, _EXPORT_FILE)
        if self.file_name in {".", ".."} or Path(self.file_name).name != self.file_name:
            msg = f"{_EXPORT_FILE.name} must be a plain file name, got {self.file_name!r}"
            raise ValueError(msg)

    @property
    def target(self) -> Path:
        return self.context.dump_directory / self.file_name

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        command_line = self.wp_command_line(
            "db", "export", shlex.quote(str(self.target)),
        )
        return self.shell(command_line, env=self.mysql_environment())


class ImportDbCommand(WpCommand):
    """Load an SQL dump into the site database."""

    file_name: Annotated[str, _IMPORT_FILE]

    def __init__(
        self,
        context: WpCliContext,
        params: Mapping[str, object],
    ) -> None:
        super().__init__(context)
        self.file_name = _file_name(params, _IMPORT_FILE)

    @property
    def source(self) -> Path:
        path = Path(self.file_name).expanduser()
        return path if path.is_absolute() else self.context.dump_directory / path

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        command_line = self.wp_command_line(
            "db", "import", shlex.quote(str(self.source)),
        )
        return self.shell(command_line, env=self.mysql_environment())
