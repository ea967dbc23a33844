"""Execution context shared by every Git command."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from wpclimate.wpc_modules.git.credentials import Credential


@dataclass(frozen=True)
class GitContext:
    """Repository directory plus the optional remote credential."""

    working_directory: Path
    credential: Credential | None = None
