"""Remote repository commands: clone, pull, push.

With a credential configured the remote URL comes from the
credential and authentication is handled by it. Without one the
commands fall back to plain git against the named remote.
"""
from __future__ import annotations

import shlex
from collections.abc import Mapping
from typing import Annotated

from returns.io import IOResult, IOSuccess

from wpclimate.wpc_modules import io_ops
from wpclimate.wpc_modules.commands.base import bag_value
from wpclimate.wpc_modules.commands.types import Param, ParamKind
from wpclimate.wpc_modules.errors import ClimateError
from wpclimate.wpc_modules.git.base import GitCommand
from wpclimate.wpc_modules.git.context import GitContext
from wpclimate.wpc_modules.types import CommandOutput

_REMOTE = Param("remote", default_value="origin", description="Remote name")
_PULL_BRANCH = Param("branch", description="Branch to pull")
_REBASE = Param(
    "rebase",
    ParamKind.BOOLEAN,
    default_value="false",
    description="Rebase instead of merge",
)
_QUIET = Param(
    "quiet", ParamKind.BOOLEAN, default_value="false", description="Suppress output",
)
_PUSH_BRANCH = Param(
    "branch",
    default_value="main",
    description="Branch to push; blank pushes the current branch",
)
_SET_UPSTREAM = Param(
    "setUpstream",
    ParamKind.BOOLEAN,
    default_value="false",
    description="Set the upstream for the branch",
)
_FORCE = Param(
    "force", ParamKind.BOOLEAN, default_value="false", description="Force the push",
)


class GitCloneCommand(GitCommand):
    """Clone a repository into the working directory."""

    def __init__(
        self,
        context: GitContext,
        remote: Annotated[
            str,
            Param("remote", required=True, description="Repository URL to clone"),
        ],
    ) -> None:
        super().__init__(context)
        if not remote.strip():
            msg = "remote must not be empty"
            raise ValueError(msg)
        self.remote = remote.strip()

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        plain = f"git clone --progress {shlex.quote(self.remote)}"
        remote = self.with_fallback(
            self.authenticated("clone", url=self.remote),
            plain,
        )
        return self.run_remote(remote)


class GitPullCommand(GitCommand):
    remote: Annotated[str, _REMOTE]
    branch: Annotated[str, _PULL_BRANCH]
    rebase: Annotated[bool, _REBASE]
    quiet: Annotated[bool, _QUIET]

    def __init__(self, context: GitContext, params: Mapping[str, object]) -> None:
        super().__init__(context)
        self.remote = str(bag_value(params, _REMOTE) or "origin")
        self.branch = str(bag_value(params, _PULL_BRANCH) or "")
        self.rebase = bool(bag_value(params, _REBASE))
        self.quiet = bool(bag_value(params, _QUIET))

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        options = []
        if self.rebase:
            options.append("--rebase")
        if self.quiet:
            options.append("--quiet")
        branch = [shlex.quote(self.branch)] if self.branch else []

        plain = " ".join(["git", "pull", *options, shlex.quote(self.remote), *branch])
        remote = self.authenticated("pull", *options).map(
            lambda pair: (" ".join([pair[0], *branch]), pair[1]),
        )
        return self.run_remote(self.with_fallback(remote, plain))


class GitPushCommand(GitCommand):
    remote: Annotated[str, _REMOTE]
    branch: Annotated[str, _PUSH_BRANCH]
    set_upstream: Annotated[bool, _SET_UPSTREAM]
    force: Annotated[bool, _FORCE]

    def __init__(self, context: GitContext, params: Mapping[str, object]) -> None:
        super().__init__(context)
        self.remote = str(bag_value(params, _REMOTE) or "origin")
        self.branch = str(bag_value(params, _PUSH_BRANCH) or "").strip()
        self.set_upstream = bool(bag_value(params, _SET_UPSTREAM))
        self.force = bool(bag_value(params, _FORCE))

    def current_branch(self) -> IOResult[str, ClimateError]:
        return io_ops.run_shell_command(
            "git rev-parse --abbrev-ref HEAD",
            cwd=str(self.context.working_directory),
        ).map(lambda result: result.stdout.strip())

    def run(self) -> IOResult[CommandOutput, ClimateError]:
        branch_result = (
            IOSuccess(self.branch) if self.branch else self.current_branch()
        )
        return branch_result.bind(self._push)

    def _push(self, branch: str) -> IOResult[CommandOutput, ClimateError]:
        options = []
        if self.force:
            options.append("--force")
        if self.set_upstream:
            options.append("--set-upstream")
        refs = [shlex.quote(branch)] if branch else []

        plain = " ".join(["git", "push", *options, shlex.quote(self.remote), *refs])
        remote = self.authenticated("push", *options).map(
            lambda pair: (" ".join([pair[0], *refs]), pair[1]),
        )
        return self.run_remote(self.with_fallback(remote, plain))
