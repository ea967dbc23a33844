"""Local repository commands: status, add, reset, commit, diff, ls-files."""
from __future__ import annotations

import shlex
from collections.abc import Mapping
from typing import Annotated

from returns.io import IOResult

from wpclimate.wpc_modules.commands.base import bag_value
from wpclimate.wpc_modules.commands.types import Param, ParamKind
from wpclimate.wpc_modules.errors import ClimateError
from wpclimate.wpc_modules.git.base import GitCommand, as_list, quote_all
from wpclimate.wpc_modules.git.context import GitContext
from wpclimate.wpc_modules.types import CommandOutput

_ADD_FILES = Param(
    "files", ParamKind.PATH, required=True, description="Files to stage",
)
_RESET_FILES = Param("files", ParamKind.PATH, description="Files to unstage")
_RESET_HARD = Param(
    "hard",
    ParamKind.BOOLEAN,
    default_value="false",
    description="Discard working tree changes",
)
_MESSAGE = Param("message", required=True, description="Commit message")
_AMEND = Param(
    "amend",
    ParamKind.BOOLEAN,
    default_value="false",
    description="Amend the previous commit",
)
_DIFF_FILE = Param("file", ParamKind.PATH, description="Limit the diff to one file")
_STAGED = Param(
    "staged",
    ParamKind.BOOLEAN,
    default_value="false",
    description="Compare the index with HEAD",
)
_COMMIT1 = Param("commit1", description="First commit to compare")
_COMMIT2 = Param("commit2", description="Second commit to compare")
_STAGE = Param(
    "stage",
    ParamKind.BOOLEAN,
    default_value="true",
    description="Show staged contents' mode bits, object name and stage number",
)
_CACHED = Param(
    "cached", ParamKind.BOOLEAN, default_value="false", description="Show cached files",
)
_DELETED = Param(
    "deleted", ParamKind.BOOLEAN, default_value="false", description="Show deleted files",
)
_OTHERS = Param(
    "others", ParamKind.BOOLEAN, default_value="false", description="Show untracked files",
)


class GitStatusCommand(GitCommand):
    def run(self) -> IOResult[CommandOutput, ClimateError]:
        return self.shell("git status")


class GitAddCommand(GitCommand):
    """git add <files>."""

    files: Annotated[list[str], _ADD_FILES]

    def __init__(self, context: GitContext, params: Mapping[str, object]) -> None:
        super().__init__(context)
        self.files = as_list(bag_value(params, _ADD_FILES))
        if not self.files:
            msg = "At least one file must be given to git-add"
            raise ValueError(msg)

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        return self.shell(" ".join(["git", "add", *quote_all(self.files)]))


class GitResetCommand(GitCommand):
    """git reset --hard, or git reset HEAD [files]."""

    files: Annotated[list[str], _RESET_FILES]
    hard: Annotated[bool, _RESET_HARD]

    def __init__(self, context: GitContext, params: Mapping[str, object]) -> None:
        super().__init__(context)
        self.files = as_list(bag_value(params, _RESET_FILES))
        self.hard = bool(bag_value(params, _RESET_HARD))

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        parts = ["git", "reset", "--hard" if self.hard else "HEAD"]
        parts.extend(quote_all(self.files))
        return self.shell(" ".join(parts))


class GitCommitCommand(GitCommand):
    """git commit -m <message> [--amend]."""

    message: Annotated[str, _MESSAGE]
    amend: Annotated[bool, _AMEND]

    def __init__(self, context: GitContext, params: Mapping[str, object]) -> None:
        super().__init__(context)
        self.message = str(bag_value(params, _MESSAGE))
        if not self.message.strip():
            msg = "Commit message must not be empty"
            raise ValueError(msg)
        self.amend = bool(bag_value(params, _AMEND))

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        parts = ["git", "commit", "-m", shlex.quote(self.message)]
        if self.amend:
            parts.append("--amend")
        return self.shell(" ".join(parts))


class GitDiffCommand(GitCommand):
    """git diff between commits, the index or the working tree."""

    file: Annotated[str, _DIFF_FILE]
    staged: Annotated[bool, _STAGED]
    commit1: Annotated[str, _COMMIT1]
    commit2: Annotated[str, _COMMIT2]

    def __init__(self, context: GitContext, params: Mapping[str, object]) -> None:
        super().__init__(context)
        self.file = str(bag_value(params, _DIFF_FILE) or "")
        self.staged = bool(bag_value(params, _STAGED))
        self.commit1 = str(bag_value(params, _COMMIT1) or "")
        self.commit2 = str(bag_value(params, _COMMIT2) or "")

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        parts = ["git", "diff"]
        if self.staged:
            parts.append("--staged")
        parts.extend(shlex.quote(c) for c in (self.commit1, self.commit2) if c)
        if self.file:
            parts.extend(["--", shlex.quote(self.file)])
        return self.shell(" ".join(parts))


class GitLsFilesCommand(GitCommand):
    stage: Annotated[bool, _STAGE]
    cached: Annotated[bool, _CACHED]
    deleted: Annotated[bool, _DELETED]
    others: Annotated[bool, _OTHERS]

    def __init__(self, context: GitContext, params: Mapping[str, object]) -> None:
        super().__init__(context)
        self.stage = bool(bag_value(params, _STAGE))
        self.cached = bool(bag_value(params, _CACHED))
        self.deleted = bool(bag_value(params, _DELETED))
        self.others = bool(bag_value(params, _OTHERS))

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        flags = {
            "--stage": self.stage,
            "--cached": self.cached,
            "--deleted": self.deleted,
            "--others": self.others,
        }
        parts = ["git", "ls-files", *(flag for flag, on in flags.items() if on)]
        return self.shell(" ".join(parts))
