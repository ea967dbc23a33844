"""Settings layout and WP-CLI configuration loading.

Everything lives under the working directory:

    <workdir>/.settings/wpCliConf.json
    <workdir>/.settings/gitConf.json
    <workdir>/.settings/workflows/<flowName>.json
    <workdir>/.dump_directory/
"""
from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError
from returns.io import IOFailure, IOResult, IOSuccess

from wpclimate.wpc_modules import io_ops
from wpclimate.wpc_modules.errors import ClimateError, ErrorType
from wpclimate.wpc_modules.wp.context import WpCliModel

WORKDIR_ENV_VAR = "WPCLIMATE_WORKDIR"
SETTINGS_DIRECTORY = ".settings"
WORKFLOW_DIRECTORY = "workflows"
DUMP_DIRECTORY = ".dump_directory"
WP_CLI_CONFIG_FILE = "wpCliConf.json"
GIT_CONFIG_FILE = "gitConf.json"


class ClimateSettings(BaseModel):
    """Paths derived from one working directory."""

    model_config = ConfigDict(frozen=True)

    working_directory: Path

    @classmethod
    def from_working_directory(cls, path: str | Path) -> ClimateSettings:
        return cls(working_directory=Path(path).expanduser().resolve())

    @property
    def settings_directory(self) -> Path:
        return self.working_directory / SETTINGS_DIRECTORY

    @property
    def workflow_directory(self) -> Path:
        return self.settings_directory / WORKFLOW_DIRECTORY

    @property
    def dump_directory(self) -> Path:
        return self.working_directory / DUMP_DIRECTORY

    @property
    def wp_cli_config_file(self) -> Path:
        return self.settings_directory / WP_CLI_CONFIG_FILE

    @property
    def git_config_file(self) -> Path:
        return self.settings_directory / GIT_CONFIG_FILE


def prepare_layout(settings: ClimateSettings) -> IOResult[ClimateSettings, ClimateError]:
    """Create the settings, workflow and dump directories."""
    return (
        io_ops.ensure_directory(settings.settings_directory)
        .bind(lambda _: io_ops.ensure_directory(settings.workflow_directory))
        .bind(lambda _: io_ops.ensure_directory(settings.dump_directory))
        .map(lambda _: settings)
    )


def load_wp_cli_model(settings: ClimateSettings) -> IOResult[WpCliModel, ClimateError]:
    """Read wpCliConf.json. A missing file means php/wp from PATH."""
    path = settings.wp_cli_config_file

    def _absent(error: ClimateError) -> IOResult[str | None, ClimateError]:
        if error.error_type == "FileNotFoundError":
            return IOSuccess(None)
        return IOFailure(error)

    def _parse(text: str | None) -> IOResult[WpCliModel, ClimateError]:
        if text is None:
            return IOSuccess(WpCliModel())
        try:
            return IOSuccess(WpCliModel.model_validate_json(text))
        except ValidationError as exc:
            return IOFailure(
                ClimateError(
                    source="config.load_wp_cli_model",
                    error_type=ErrorType.CONFIGURATION_MISSING,
                    message=f"Invalid WP-CLI configuration in {path}",
                    context={"path": str(path), "errors": exc.error_count()},
                ),
            )

    return io_ops.read_file(path).lash(_absent).bind(_parse)


def save_wp_cli_model(
    settings: ClimateSettings,
    model: WpCliModel,
) -> IOResult[Path, ClimateError]:
    return io_ops.write_file(
        settings.wp_cli_config_file,
        model.model_dump_json(by_alias=True, exclude_none=True, indent=2),
    )
