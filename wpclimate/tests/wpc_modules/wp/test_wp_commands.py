"""Tests for WP command lines and execution results."""
from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

import pytest
from returns.io import IOFailure, IOSuccess
from returns.unsafe import unsafe_perform_io

from wpclimate.wpc_modules.errors import ErrorType
from wpclimate.wpc_modules.types import CommandOutput, ShellResult
from wpclimate.wpc_modules.wp.context import WpCliContext, WpCliModel
from wpclimate.wpc_modules.wp.database import (
    CheckDbCommand,
    ExportDbCommand,
    ImportDbCommand,
    RepairDbCommand,
)
from wpclimate.wpc_modules.wp.maintenance import (
    FlushCachesCommand,
    FlushTransientCommand,
    RewriteFlushCommand,
)
from wpclimate.wpc_modules.wp.search_replace import SearchReplaceCommand

if TYPE_CHECKING:
    from pathlib import Path
    from unittest.mock import MagicMock

    from wpclimate.wpc_modules.commands.base import BaseCommand


def _prefix(context: WpCliContext) -> str:
    return f"php wp --path={shlex.quote(str(context.working_directory))}"


def _output(command: BaseCommand) -> CommandOutput:
    result = command.execute()
    assert isinstance(result, IOSuccess)
    return unsafe_perform_io(result.unwrap())


class TestSearchReplace:
    def test_command_line(self, mock_shell: MagicMock, wp_context: WpCliContext) -> None:
        command = SearchReplaceCommand(
            wp_context, "http://old.test", "https://new.test", dry_run=True,
        )
        output = _output(command)
        assert output.successful
        assert output.command_line == (
            f"{_prefix(wp_context)} search-replace http://old.test"
            " https://new.test --dry-run"
        )

    def test_only_needs_wp_cli(self, mock_shell: MagicMock, wp_context: WpCliContext) -> None:
        SearchReplaceCommand(wp_context, "a", "b").execute()
        commands = [c.args[0] for c in mock_shell.call_args_list]
        assert commands[:2] == ["php --version", "php wp --version"]
        assert not any("core version" in c for c in commands)

    def test_values_are_quoted(self, mock_shell: MagicMock, wp_context: WpCliContext) -> None:
        command = SearchReplaceCommand(wp_context, "it's", "new value", all_tables=True)
        output = _output(command)
        assert output.command_line.endswith(
            """search-replace 'it'"'"'s' 'new value' --all-tables""",
        )

    def test_empty_old_value_rejected(self, wp_context: WpCliContext) -> None:
        with pytest.raises(ValueError, match="oldValue"):
            SearchReplaceCommand(wp_context, "", "b")

    def test_runs_in_site_directory(self, mock_shell: MagicMock, wp_context: WpCliContext) -> None:
        SearchReplaceCommand(wp_context, "a", "b").execute()
        assert mock_shell.call_args.kwargs["cwd"] == str(wp_context.working_directory)


class TestFixedCommands:
    @pytest.mark.parametrize(
        ("command_class", "arguments"),
        [
            (FlushTransientCommand, "transient delete --all"),
            (FlushCachesCommand, "cache flush"),
            (RewriteFlushCommand, "rewrite flush"),
            (CheckDbCommand, "db check"),
            (RepairDbCommand, "db repair"),
        ],
    )
    def test_command_line(
        self,
        mock_shell: MagicMock,
        wp_context: WpCliContext,
        command_class: type[BaseCommand],
        arguments: str,
    ) -> None:
        output = _output(command_class(wp_context))
        assert output.command_line == f"{_prefix(wp_context)} {arguments}"

    def test_site_check_runs_first(self, mock_shell: MagicMock, wp_context: WpCliContext) -> None:
        FlushCachesCommand(wp_context).execute()
        commands = [c.args[0] for c in mock_shell.call_args_list]
        assert len(commands) == 4
        assert "core version" in commands[2]
        assert commands[3].endswith("cache flush")

    def test_mysql_dir_on_path(self, mock_shell: MagicMock, tmp_path: Path) -> None:
        context = WpCliContext(
            model=WpCliModel(MYSQL="/opt/mysql/bin/mysql"),
            working_directory=tmp_path,
            dump_directory=tmp_path / "dumps",
        )
        CheckDbCommand(context).execute()
        env = mock_shell.call_args.kwargs["env"]
        assert env["PATH"].startswith("/opt/mysql/bin")

    def test_no_mysql_no_env(self, mock_shell: MagicMock, wp_context: WpCliContext) -> None:
        RepairDbCommand(wp_context).execute()
        assert mock_shell.call_args.kwargs["env"] is None


class TestDatabaseTransfer:
    def test_export_into_dump_directory(
        self, mock_shell: MagicMock, wp_context: WpCliContext,
    ) -> None:
        output = _output(ExportDbCommand(wp_context, {"fileName": "backup.sql"}))
        target = shlex.quote(str(wp_context.dump_directory / "backup.sql"))
        assert output.command_line == f"{_prefix(wp_context)} db export {target}"

    def test_export_requires_file_name(self, wp_context: WpCliContext) -> None:
        with pytest.raises(ValueError, match="fileName"):
            ExportDbCommand(wp_context, {})

    def test_export_rejects_blank_name(self, wp_context: WpCliContext) -> None:
        with pytest.raises(ValueError, match="fileName"):
            ExportDbCommand(wp_context, {"fileName": "  "})

    @pytest.mark.parametrize(
        "name", ["/etc/evil.sql", "../../outside.sql", "nested/backup.sql", "..", "."],
    )
    def test_export_stays_in_dump_directory(
        self, mock_shell: MagicMock, wp_context: WpCliContext, name: str,
    ) -> None:
        with pytest.raises(ValueError, match="plain file name"):
            ExportDbCommand(wp_context, {"fileName": name})
        mock_shell.assert_not_called()

    def test_import_relative_name(self, wp_context: WpCliContext) -> None:
        command = ImportDbCommand(wp_context, {"fileName": "backup.sql"})
        assert command.source == wp_context.dump_directory / "backup.sql"

    def test_import_absolute_path(
        self, mock_shell: MagicMock, wp_context: WpCliContext, tmp_path: Path,
    ) -> None:
        dump = tmp_path / "elsewhere.sql"
        output = _output(ImportDbCommand(wp_context, {"fileName": str(dump)}))
        assert output.command_line.endswith(f"db import {shlex.quote(str(dump))}")


class TestFailures:
    def test_nonzero_exit_is_unsuccessful_output(
        self, mock_shell: MagicMock, wp_context: WpCliContext,
    ) -> None:
        def fake(command: str, **_: object) -> IOSuccess:
            rc = 1 if command.endswith("cache flush") else 0
            return IOSuccess(ShellResult(rc, "", "Error: no cache" if rc else "", command))

        mock_shell.side_effect = fake
        output = _output(FlushCachesCommand(wp_context))
        assert not output.successful
        assert "no cache" in output.error_text

    def test_precondition_failure_stops_command(
        self, mock_shell: MagicMock, wp_context: WpCliContext,
    ) -> None:
        def fake(command: str, **_: object) -> IOSuccess:
            rc = 1 if "core version" in command else 0
            return IOSuccess(ShellResult(rc, "", "", command))

        mock_shell.side_effect = fake
        result = FlushTransientCommand(wp_context).execute()
        assert isinstance(result, IOFailure)
        error = unsafe_perform_io(result.failure())
        assert error.error_type == ErrorType.NOT_A_WORDPRESS_DIRECTORY
        assert not any(
            "transient" in c.args[0] for c in mock_shell.call_args_list
        )
