"""Tests for settings layout and WP-CLI model loading."""
from __future__ import annotations

import json
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOSuccess
from returns.unsafe import unsafe_perform_io

from wpclimate.wpc_modules.config import (
    ClimateSettings,
    load_wp_cli_model,
    prepare_layout,
    save_wp_cli_model,
)
from wpclimate.wpc_modules.errors import ErrorType
from wpclimate.wpc_modules.wp.context import WpCliModel

if TYPE_CHECKING:
    from pathlib import Path


def test_layout_paths(tmp_path: Path) -> None:
    settings = ClimateSettings.from_working_directory(tmp_path)
    assert settings.settings_directory == tmp_path.resolve() / ".settings"
    assert settings.workflow_directory == tmp_path.resolve() / ".settings" / "workflows"
    assert settings.dump_directory == tmp_path.resolve() / ".dump_directory"
    assert settings.wp_cli_config_file.name == "wpCliConf.json"
    assert settings.git_config_file.name == "gitConf.json"


def test_prepare_layout_creates_directories(tmp_path: Path) -> None:
    settings = ClimateSettings.from_working_directory(tmp_path)
    assert isinstance(prepare_layout(settings), IOSuccess)
    assert settings.workflow_directory.is_dir()
    assert settings.dump_directory.is_dir()


def test_missing_wp_cli_config_uses_defaults(tmp_path: Path) -> None:
    settings = ClimateSettings.from_working_directory(tmp_path)
    model = unsafe_perform_io(load_wp_cli_model(settings).unwrap())
    assert model == WpCliModel()
    assert model.php == "php"
    assert model.wp_cli == "wp"
    assert model.mysql is None


def test_reads_wp_cli_config(tmp_path: Path) -> None:
    settings = ClimateSettings.from_working_directory(tmp_path)
    settings.settings_directory.mkdir()
    settings.wp_cli_config_file.write_text(
        json.dumps({"PHP": "/usr/bin/php8.2", "WPCLI": "/opt/wp-cli.phar", "MYSQL": "/usr/bin/mysql"}),
    )
    model = unsafe_perform_io(load_wp_cli_model(settings).unwrap())
    assert model.php == "/usr/bin/php8.2"
    assert model.wp_cli == "/opt/wp-cli.phar"
    assert model.mysql == "/usr/bin/mysql"


def test_invalid_wp_cli_config(tmp_path: Path) -> None:
    settings = ClimateSettings.from_working_directory(tmp_path)
    settings.settings_directory.mkdir()
    settings.wp_cli_config_file.write_text('{"PHP": 5')
    result = load_wp_cli_model(settings)
    assert isinstance(result, IOFailure)
    assert unsafe_perform_io(result.failure()).error_type == ErrorType.CONFIGURATION_MISSING


def test_save_wp_cli_config(tmp_path: Path) -> None:
    settings = ClimateSettings.from_working_directory(tmp_path)
    save_wp_cli_model(settings, WpCliModel(PHP="/usr/bin/php"))
    stored = json.loads(settings.wp_cli_config_file.read_text())
    assert stored == {"PHP": "/usr/bin/php", "WPCLI": "wp"}
