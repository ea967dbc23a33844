"""Tests for CommandRegistry and parameter extraction."""
from __future__ import annotations

import logging
from abc import abstractmethod
from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated

import pytest
from returns.io import IOResult, IOSuccess

from wpclimate.wpc_modules.app import build_registry
from wpclimate.wpc_modules.commands.base import BaseCommand
from wpclimate.wpc_modules.commands.registry import CommandRegistry, extract_params
from wpclimate.wpc_modules.commands.types import (
    CallingConvention,
    CommandFamily,
    CommandGroup,
    CommandSpec,
    Param,
    ParamKind,
)
from wpclimate.wpc_modules.errors import ClimateError
from wpclimate.wpc_modules.types import CommandOutput

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


# --- Test command classes ---


class FakeCommand(BaseCommand):
    def run(self) -> IOResult[CommandOutput, ClimateError]:
        return IOSuccess(CommandOutput(successful=True))


class OtherFamilyCommand(BaseCommand):
    def run(self) -> IOResult[CommandOutput, ClimateError]:
        return IOSuccess(CommandOutput(successful=True))


class TypedCommand(FakeCommand):
    label: Annotated[str, Param("ignoredField")]

    def __init__(
        self,
        context: object,
        target: Annotated[str, Param("target", required=True)],
        retries: Annotated[
            int, Param("retries", ParamKind.INTEGER, default_value="3"),
        ] = 3,
    ) -> None:
        super().__init__(context)
        self.target = target
        self.retries = retries


class BagCommand(FakeCommand):
    files: Annotated[list[str], Param("files", ParamKind.PATH, required=True)]
    force: Annotated[bool, Param("force", ParamKind.BOOLEAN)]

    def __init__(self, context: object, params: Mapping[str, object]) -> None:
        super().__init__(context)
        self.params = params


class FieldsWithoutBagCommand(FakeCommand):
    """Annotated fields are ignored when the constructor takes no bag."""

    verbose: Annotated[bool, Param("verbose", ParamKind.BOOLEAN)]


class AbstractCommand(FakeCommand):
    @abstractmethod
    def extra(self) -> None: ...


class NotACommand:
    pass


def _family(*specs: CommandSpec) -> CommandFamily:
    return CommandFamily(group=CommandGroup.WP, base=FakeCommand, commands=specs)


# --- Parameter extraction ---


class TestExtractParams:
    def test_typed_constructor_params_in_order(self) -> None:
        params = extract_params(TypedCommand)
        assert list(params) == ["target", "retries"]
        assert params["target"].required is True
        assert params["retries"].kind is ParamKind.INTEGER

    def test_constructor_params_win_over_fields(self) -> None:
        assert "ignoredField" not in extract_params(TypedCommand)

    def test_bag_constructor_uses_fields(self) -> None:
        params = extract_params(BagCommand)
        assert list(params) == ["files", "force"]
        assert params["files"].kind is ParamKind.PATH

    def test_fields_without_bag_yield_nothing(self) -> None:
        assert extract_params(FieldsWithoutBagCommand) == {}

    def test_context_only_has_no_params(self) -> None:
        assert extract_params(FakeCommand) == {}


# --- Registry ---


class TestRegistry:
    def test_initialize_is_idempotent(self, mocker: MockerFixture) -> None:
        registry = CommandRegistry([
            _family(
                CommandSpec("a", FakeCommand, CallingConvention.CONTEXT_ONLY),
                CommandSpec("b", BagCommand, CallingConvention.BAG),
            ),
        ])
        spy = mocker.spy(registry, "_register")
        registry.initialize()
        registry.initialize()
        registry.get_all_commands()
        assert spy.call_count == 2
        assert registry.initialized

    def test_lookups_initialize_lazily(self) -> None:
        registry = CommandRegistry([
            _family(CommandSpec("a", FakeCommand, CallingConvention.CONTEXT_ONLY)),
        ])
        assert registry.get_command("a") is not None
        assert registry.initialized

    def test_get_command_by_group(self) -> None:
        registry = CommandRegistry([
            _family(CommandSpec("a", FakeCommand, CallingConvention.CONTEXT_ONLY)),
        ])
        assert registry.get_command("a", CommandGroup.WP) is not None
        assert registry.get_command("a", CommandGroup.GIT) is None
        assert registry.get_command("missing") is None

    def test_cross_group_clash_resolves_to_wp(self) -> None:
        registry = CommandRegistry([
            _family(CommandSpec("shared", FakeCommand, CallingConvention.CONTEXT_ONLY)),
            CommandFamily(
                group=CommandGroup.GIT,
                base=OtherFamilyCommand,
                commands=(
                    CommandSpec("shared", OtherFamilyCommand, CallingConvention.CONTEXT_ONLY),
                ),
            ),
        ])
        by_name = registry.get_command("shared")
        assert by_name is not None
        assert by_name.group is CommandGroup.WP
        assert registry.get_all_commands()["shared"] is by_name
        git = registry.get_command("shared", CommandGroup.GIT)
        assert git is not None
        assert git.implementation is OtherFamilyCommand

    def test_snapshot_is_read_only(self) -> None:
        registry = CommandRegistry([
            _family(CommandSpec("a", FakeCommand, CallingConvention.CONTEXT_ONLY)),
        ])
        commands = registry.get_all_commands()
        with pytest.raises(TypeError):
            commands["b"] = commands["a"]  # type: ignore[index]
        with pytest.raises(TypeError):
            commands["a"].parameters["x"] = Param("x")  # type: ignore[index]

    def test_duplicate_name_last_wins(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = CommandRegistry([
            _family(
                CommandSpec("dup", FakeCommand, CallingConvention.CONTEXT_ONLY),
                CommandSpec("dup", BagCommand, CallingConvention.BAG),
            ),
        ])
        with caplog.at_level(logging.WARNING):
            registry.initialize()
        info = registry.get_command("dup")
        assert info is not None
        assert info.implementation is BagCommand
        assert "Duplicate WP command 'dup'" in caplog.text

    def test_non_conforming_type_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = CommandRegistry([
            _family(
                CommandSpec("stranger", NotACommand, CallingConvention.CONTEXT_ONLY),
                CommandSpec("other", OtherFamilyCommand, CallingConvention.CONTEXT_ONLY),
                CommandSpec("abstract", AbstractCommand, CallingConvention.CONTEXT_ONLY),
                CommandSpec("good", FakeCommand, CallingConvention.CONTEXT_ONLY),
            ),
        ])
        with caplog.at_level(logging.WARNING):
            commands = registry.get_all_commands()
        assert list(commands) == ["good"]
        assert "stranger" in caplog.text
        assert "abstract" in caplog.text

    def test_register_after_initialize(self) -> None:
        registry = CommandRegistry([_family()])
        info = registry.register(
            CommandGroup.WP,
            CommandSpec("late", TypedCommand, CallingConvention.TYPED),
        )
        assert info is not None
        assert registry.get_command("late") is info

    def test_register_rejects_unknown_family(self) -> None:
        registry = CommandRegistry([_family()])
        spec = CommandSpec("git-thing", FakeCommand, CallingConvention.CONTEXT_ONLY)
        assert registry.register(CommandGroup.GIT, spec) is None
        assert registry.get_command("git-thing") is None


class TestBuiltInFamilies:
    def test_groups_are_filtered(self) -> None:
        registry = build_registry()
        wp = registry.get_commands_by_group(CommandGroup.WP)
        git = registry.get_commands_by_group(CommandGroup.GIT)
        assert set(wp) == {
            "search-replace",
            "flush-transient",
            "flush-caches",
            "rewrite-flush",
            "check-db",
            "repair-db",
            "export-db",
            "import-db",
        }
        assert set(git) == {
            "git-status",
            "git-add",
            "git-reset",
            "git-commit",
            "git-diff",
            "git-ls-files",
            "git-clone",
            "git-pull",
            "git-push",
        }
        assert all(i.group is CommandGroup.WP for i in wp.values())
        assert len(registry.get_all_commands()) == len(wp) + len(git)

    def test_search_replace_params(self) -> None:
        info = build_registry().get_command("search-replace")
        assert info is not None
        assert info.convention is CallingConvention.TYPED
        assert list(info.parameters) == ["oldValue", "newValue", "allTables", "dryRun"]
        assert [p.name for p in info.required_parameters()] == ["oldValue", "newValue"]
        assert info.parameters["dryRun"].default() is False

    def test_bag_command_params_come_from_fields(self) -> None:
        registry = build_registry()
        export = registry.get_command("export-db", CommandGroup.WP)
        ls_files = registry.get_command("git-ls-files", CommandGroup.GIT)
        assert export is not None
        assert ls_files is not None
        assert list(export.parameters) == ["fileName"]
        assert export.parameters["fileName"].kind is ParamKind.PATH
        assert ls_files.parameters["stage"].default() is True
        assert ls_files.parameters["others"].default() is False

    def test_context_only_commands_have_no_params(self) -> None:
        registry = build_registry()
        for name in ("git-status", "flush-caches", "check-db"):
            info = registry.get_command(name)
            assert info is not None
            assert dict(info.parameters) == {}

    def test_clone_remote_is_required(self) -> None:
        info = build_registry().get_command("git-clone")
        assert info is not None
        assert info.parameters["remote"].required is True
