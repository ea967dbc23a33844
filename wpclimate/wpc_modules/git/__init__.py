"""Git command family."""
from wpclimate.wpc_modules.commands.types import (
    CallingConvention,
    CommandFamily,
    CommandGroup,
    CommandSpec,
)
from wpclimate.wpc_modules.git.base import GitCommand
from wpclimate.wpc_modules.git.remote import (
    GitCloneCommand,
    GitPullCommand,
    GitPushCommand,
)
from wpclimate.wpc_modules.git.staging import (
    GitAddCommand,
    GitCommitCommand,
    GitDiffCommand,
    GitLsFilesCommand,
    GitResetCommand,
    GitStatusCommand,
)

GIT_FAMILY = CommandFamily(
    group=CommandGroup.GIT,
    base=GitCommand,
    commands=(
        CommandSpec(
            "git-status",
            GitStatusCommand,
            CallingConvention.CONTEXT_ONLY,
            "Show the working tree status",
        ),
        CommandSpec(
            "git-add",
            GitAddCommand,
            CallingConvention.BAG,
            "Stage files",
        ),
        CommandSpec(
            "git-reset",
            GitResetCommand,
            CallingConvention.BAG,
            "Unstage files or reset the working tree",
        ),
        CommandSpec(
            "git-commit",
            GitCommitCommand,
            CallingConvention.BAG,
            "Record staged changes",
        ),
        CommandSpec(
            "git-diff",
            GitDiffCommand,
            CallingConvention.BAG,
            "Show changes",
        ),
        CommandSpec(
            "git-ls-files",
            GitLsFilesCommand,
            CallingConvention.BAG,
            "List files in the index",
        ),
        CommandSpec(
            "git-clone",
            GitCloneCommand,
            CallingConvention.TYPED,
            "Clone a repository",
        ),
        CommandSpec(
            "git-pull",
            GitPullCommand,
            CallingConvention.BAG,
            "Fetch and integrate a remote branch",
        ),
        CommandSpec(
            "git-push",
            GitPushCommand,
            CallingConvention.BAG,
            "Push a branch to the remote",
        ),
    ),
)

__all__ = ["GIT_FAMILY", "GitCommand"]
