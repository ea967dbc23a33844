"""Shared test fixtures for the wpclimate test suite."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from returns.io import IOSuccess

from wpclimate.wpc_modules.git.context import GitContext
from wpclimate.wpc_modules.types import ShellResult
from wpclimate.wpc_modules.wp.context import WpCliContext, WpCliModel

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path
    from unittest.mock import MagicMock

    from pytest_mock import MockerFixture


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    """Undo handlers and levels set by the CLI between tests."""
    logger = logging.getLogger("wpclimate")
    level, handlers = logger.level, list(logger.handlers)
    yield
    logger.setLevel(level)
    logger.handlers[:] = handlers


def ok_shell(command: str, **_: object) -> IOSuccess:
    """Stand-in for io_ops.run_shell_command: every command exits 0."""
    return IOSuccess(
        ShellResult(return_code=0, stdout="", stderr="", command=command),
    )


@pytest.fixture
def mock_shell(mocker: MockerFixture) -> MagicMock:
    """Patch io_ops.run_shell_command; all commands succeed by default."""
    return mocker.patch(
        "wpclimate.wpc_modules.io_ops.run_shell_command",
        side_effect=ok_shell,
    )


@pytest.fixture
def wp_context(tmp_path: Path) -> WpCliContext:
    """WP context rooted in a temporary site directory."""
    site = tmp_path / "site"
    return WpCliContext(
        model=WpCliModel(),
        working_directory=site,
        dump_directory=site / ".dump_directory",
    )


@pytest.fixture
def git_context(tmp_path: Path) -> GitContext:
    """Git context without credentials."""
    return GitContext(working_directory=tmp_path / "repo")

