"""wpc-flow: list commands, edit and run MateFlows, and configure the tools they use.

Step indexes on the command line are 1-based, as printed by
`wpc-flow show`.
"""
from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, NoReturn

import click
from returns.io import IOFailure
from returns.unsafe import unsafe_perform_io

from wpclimate.wpc_modules import io_ops
from wpclimate.wpc_modules.app import build_app, build_registry
from wpclimate.wpc_modules.commands.types import CommandGroup
from wpclimate.wpc_modules.config import (
    WORKDIR_ENV_VAR,
    ClimateSettings,
    load_wp_cli_model,
    prepare_layout,
    save_wp_cli_model,
)
from wpclimate.wpc_modules.git.credentials import HttpsCredentials, SshCredentials
from wpclimate.wpc_modules.mateflow.types import Step, Workflow

if TYPE_CHECKING:
    from wpclimate.wpc_modules.app import ClimateApp
    from wpclimate.wpc_modules.errors import ClimateError

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
_HANDLER_NAME = "wpc-flow"


def configure_logging(*, verbose: bool) -> None:
    """Send package logs to the current stderr."""
    logger = logging.getLogger("wpclimate")
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO if verbose else logging.WARNING)


def _fail(prefix: str, error: ClimateError) -> NoReturn:
    io_ops.write_stderr(f"{prefix}: {error.message}")
    sys.exit(1)


def _open_app(ctx: click.Context) -> ClimateApp:
    result = build_app(ctx.obj)
    if isinstance(result, IOFailure):
        _fail("Setup failed", unsafe_perform_io(result.failure()))
    return unsafe_perform_io(result.unwrap())


def _load_flow(app: ClimateApp, name: str) -> Workflow:
    result = app.store.load(name)
    if isinstance(result, IOFailure):
        _fail("Cannot load flow", unsafe_perform_io(result.failure()))
    return unsafe_perform_io(result.unwrap())


def _save_flow(app: ClimateApp, workflow: Workflow) -> None:
    result = app.store.save(workflow)
    if isinstance(result, IOFailure):
        _fail("Cannot save flow", unsafe_perform_io(result.failure()))


def _parse_params(
    _ctx: click.Context,
    _param: click.Parameter,
    values: tuple[str, ...],
) -> dict[str, object]:
    """Turn key=value pairs into a parameter bag. Values may be JSON."""
    params: dict[str, object] = {}
    for item in values:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            msg = f"expected key=value, got {item!r}"
            raise click.BadParameter(msg)
        try:
            params[key.strip()] = json.loads(raw)
        except json.JSONDecodeError:
            params[key.strip()] = raw
    return params


@click.group()
@click.option(
    "--working-dir",
    envvar=WORKDIR_ENV_VAR,
    default=".",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Site directory holding .settings/",
)
@click.option("--verbose", is_flag=True, help="Log each step")
@click.pass_context
def main(ctx: click.Context, *, working_dir: str, verbose: bool) -> None:
    """Compose and run WP-CLI and Git workflows."""
    configure_logging(verbose=verbose)
    ctx.obj = ClimateSettings.from_working_directory(working_dir)


@main.command("commands")
@click.option(
    "--group",
    type=click.Choice([g.value for g in CommandGroup], case_sensitive=False),
    default=None,
    help="Only list one family",
)
def list_commands(group: str | None) -> None:
    """List available commands and their parameters."""
    registry = build_registry()
    groups = [CommandGroup(group.upper())] if group else list(CommandGroup)
    for command_group in groups:
        for name, info in sorted(registry.get_commands_by_group(command_group).items()):
            click.echo(f"{command_group.value:<4} {name:<16} {info.description}")
            for param in info.parameters.values():
                click.echo(f"       --param {param}")


@main.command("flows")
@click.pass_context
def list_flows(ctx: click.Context) -> None:
    """List saved flows."""
    app = _open_app(ctx)
    names = app.store.list_names()
    if not names:
        io_ops.write_stderr("No flows saved")
    for name in names:
        click.echo(name)


@main.command("show")
@click.argument("name")
@click.pass_context
def show_flow(ctx: click.Context, name: str) -> None:
    """Print a flow's steps."""
    workflow = _load_flow(_open_app(ctx), name)
    click.echo(f"{workflow.name}: {workflow.description}")
    for number, step in enumerate(workflow.steps, start=1):
        params = json.dumps(step.parameters, sort_keys=True)
        click.echo(f"  {number}. [{step.group}] {step.command} {params}")


@main.command("create")
@click.argument("name")
@click.option("--description", default="", help="What the flow is for")
@click.pass_context
def create_flow(ctx: click.Context, name: str, description: str) -> None:
    """Create an empty flow."""
    app = _open_app(ctx)
    if name in app.store:
        io_ops.write_stderr(f"Flow {name} already exists")
        sys.exit(1)
    _save_flow(app, Workflow(name=name, description=description))
    io_ops.write_stderr(f"Created flow {name}")


@main.command("add-step")
@click.argument("name")
@click.argument("group")
@click.argument("command")
@click.option(
    "--param",
    "params",
    multiple=True,
    callback=_parse_params,
    help="Step parameter as key=value (repeatable)",
)
@click.pass_context
def add_step(
    ctx: click.Context,
    name: str,
    group: str,
    command: str,
    params: dict[str, object],
) -> None:
    """Append a step to a flow."""
    app = _open_app(ctx)
    command_group = CommandGroup.parse(group)
    if command_group is None:
        io_ops.write_stderr(f"Unknown group: {group}")
        sys.exit(1)
    if app.registry.get_command(command, command_group) is None:
        io_ops.write_stderr(f"Command not found: {command} ({command_group.value})")
        sys.exit(1)
    workflow = _load_flow(app, name)
    workflow.add_step(Step(group=command_group, command=command, parameters=params))
    _save_flow(app, workflow)
    io_ops.write_stderr(f"Added step {len(workflow.steps)} to {name}")


def _edit_steps(ctx: click.Context, name: str, index: int, action: str) -> None:
    app = _open_app(ctx)
    workflow = _load_flow(app, name)
    if not 1 <= index <= len(workflow.steps):
        io_ops.write_stderr(f"Flow {name} has no step {index}")
        sys.exit(1)
    getattr(workflow, action)(index - 1)
    _save_flow(app, workflow)


@main.command("move-up")
@click.argument("name")
@click.argument("index", type=int)
@click.pass_context
def move_up(ctx: click.Context, name: str, index: int) -> None:
    """Swap a step with the one before it."""
    _edit_steps(ctx, name, index, "move_step_up")


@main.command("move-down")
@click.argument("name")
@click.argument("index", type=int)
@click.pass_context
def move_down(ctx: click.Context, name: str, index: int) -> None:
    """Swap a step with the one after it."""
    _edit_steps(ctx, name, index, "move_step_down")


@main.command("remove-step")
@click.argument("name")
@click.argument("index", type=int)
@click.pass_context
def remove_step(ctx: click.Context, name: str, index: int) -> None:
    """Delete one step from a flow."""
    _edit_steps(ctx, name, index, "remove_step")


@main.command("run")
@click.argument("name")
@click.pass_context
def run_flow(ctx: click.Context, name: str) -> None:
    """Run a flow, stopping at the first failing step."""
    app = _open_app(ctx)
    workflow = _load_flow(app, name)
    result = app.executor.execute(workflow)
    for outcome in result.outcomes:
        click.echo(f"{outcome.index + 1}. {outcome.step}: {outcome.status.value}")
        if outcome.output is not None and outcome.output.std_out_text.strip():
            click.echo(outcome.output.std_out_text.rstrip())
    failed = result.failed_step
    if failed is not None:
        detail = (
            failed.error.message
            if failed.error is not None
            else (failed.output.error_text.strip() if failed.output else "")
        )
        io_ops.write_stderr(f"Step failed: {failed.step}: {detail}")
        sys.exit(1)
    io_ops.write_stderr(f"Flow {name} {result.status.value.lower()}")


@main.command("delete")
@click.argument("name")
@click.pass_context
def delete_flow(ctx: click.Context, name: str) -> None:
    """Delete a saved flow."""
    app = _open_app(ctx)
    result = app.store.delete(name)
    if isinstance(result, IOFailure):
        _fail("Cannot delete flow", unsafe_perform_io(result.failure()))
    io_ops.write_stderr(f"Deleted flow {name}")


def _prepare(settings: ClimateSettings) -> None:
    layout = prepare_layout(settings)
    if isinstance(layout, IOFailure):
        _fail("Setup failed", unsafe_perform_io(layout.failure()))


def _store_credential(
    credential: SshCredentials | HttpsCredentials,
    fields: dict[str, str | None],
) -> None:
    """Update a stored record of the same type, otherwise replace it."""
    given = {key: value for key, value in fields.items() if value is not None}
    result = (
        credential.update(given) if credential.exists() else credential.configure(given)
    )
    if isinstance(result, IOFailure):
        _fail("Cannot save credentials", unsafe_perform_io(result.failure()))
    model = unsafe_perform_io(result.unwrap())
    io_ops.write_stderr(
        f"Saved {credential.credential_type.value} credentials for {model.repo_name}",
    )


@main.group("git-config")
def git_config() -> None:
    """Store the credential used by git-clone, git-pull and git-push.

    Options left out keep their stored value when the stored record
    has the same type.
    """


@git_config.command("ssh")
@click.option("--name", help="Repository name")
@click.option("--url", help="Repository URL, e.g. git@host:org/repo.git")
@click.option("--priv-path", help="Private key file")
@click.option("--pub-path", help="Public key file")
@click.pass_context
def git_config_ssh(
    ctx: click.Context,
    name: str | None,
    url: str | None,
    priv_path: str | None,
    pub_path: str | None,
) -> None:
    """Authenticate with an SSH key."""
    settings: ClimateSettings = ctx.obj
    _prepare(settings)
    _store_credential(
        SshCredentials(settings.git_config_file),
        {"name": name, "url": url, "privPath": priv_path, "pubPath": pub_path},
    )


@git_config.command("https")
@click.option("--name", help="Repository name")
@click.option("--url", help="https:// repository URL")
@click.option("--username", help="Account name")
@click.option(
    "--password",
    envvar="WPCLIMATE_GIT_PASSWORD",
    help="Password or access token",
)
@click.pass_context
def git_config_https(
    ctx: click.Context,
    name: str | None,
    url: str | None,
    username: str | None,
    password: str | None,
) -> None:
    """Authenticate with a username and password or token."""
    settings: ClimateSettings = ctx.obj
    _prepare(settings)
    _store_credential(
        HttpsCredentials(settings.git_config_file),
        {"name": name, "url": url, "username": username, "password": password},
    )


@main.command("wp-config")
@click.option("--php", help="PHP executable")
@click.option("--wp-cli", help="wp-cli executable or phar")
@click.option("--mysql", help="MySQL client binary, for db commands")
@click.pass_context
def wp_config(
    ctx: click.Context,
    php: str | None,
    wp_cli: str | None,
    mysql: str | None,
) -> None:
    """Show or change the PHP, WP-CLI and MySQL paths."""
    settings: ClimateSettings = ctx.obj
    _prepare(settings)
    loaded = load_wp_cli_model(settings)
    if isinstance(loaded, IOFailure):
        _fail("Cannot read WP-CLI configuration", unsafe_perform_io(loaded.failure()))
    model = unsafe_perform_io(loaded.unwrap())

    changes = {
        field: value
        for field, value in (("php", php), ("wp_cli", wp_cli), ("mysql", mysql))
        if value is not None
    }
    if changes:
        model = model.model_copy(update=changes)
        saved = save_wp_cli_model(settings, model)
        if isinstance(saved, IOFailure):
            _fail("Cannot save WP-CLI configuration", unsafe_perform_io(saved.failure()))
        io_ops.write_stderr(f"Saved WP-CLI configuration to {settings.wp_cli_config_file}")

    click.echo(f"PHP    {model.php}")
    click.echo(f"WPCLI  {model.wp_cli}")
    click.echo(f"MYSQL  {model.mysql or '-'}")


if __name__ == "__main__":  # pragma: no cover
    main()
