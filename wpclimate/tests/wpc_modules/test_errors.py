"""Tests for ClimateError."""
from __future__ import annotations

from pathlib import Path

import pytest

from wpclimate.wpc_modules.errors import ClimateError, ErrorType


def test_to_dict_makes_context_serializable() -> None:
    """Non-JSON context values become strings."""
    err = ClimateError(
        source="mateflow.store",
        error_type=ErrorType.FLOW_NOT_FOUND,
        message="There is no flow named deploy",
        context={"path": Path("/tmp/deploy.json"), "names": ("a", "b")},
    )
    data = err.to_dict()
    assert data["error_type"] == "FlowNotFoundError"
    assert data["context"] == {"path": "/tmp/deploy.json", "names": ["a", "b"]}


def test_str_includes_type_and_source() -> None:
    err = ClimateError(
        source="commands.factory",
        error_type=ErrorType.COMMAND_NOT_FOUND,
        message="Command not found: nope",
    )
    assert str(err) == "CommandNotFoundError [commands.factory]: Command not found: nope"


def test_str_truncates_long_context() -> None:
    err = ClimateError(
        source="io_ops.run_shell_command",
        error_type="OSError",
        message="boom",
        context={"command": "x" * 1000},
    )
    text = str(err)
    assert text.endswith("...")
    assert len(text) < 400


def test_is_frozen() -> None:
    err = ClimateError(source="s", error_type="t", message="m")
    with pytest.raises(AttributeError):
        err.message = "changed"  # type: ignore[misc]
