"""Execution context shared by every WP command."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class WpCliModel(BaseModel):
    """Locations of the php, wp-cli and mysql executables.

    Persisted as .settings/wpCliConf.json with keys PHP, WPCLI, MYSQL.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    php: str = Field(default="php", alias="PHP")
    wp_cli: str = Field(default="wp", alias="WPCLI")
    mysql: str | None = Field(default=None, alias="MYSQL")


@dataclass(frozen=True)
class WpCliContext:
    """WP-CLI model plus the site and dump directories."""

    model: WpCliModel
    working_directory: Path
    dump_directory: Path
