"""Wires the registry, factories, contexts, executor and store together."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from wpclimate.wpc_modules.commands.factory import CommandFactory
from wpclimate.wpc_modules.commands.registry import CommandRegistry
from wpclimate.wpc_modules.commands.types import CommandGroup
from wpclimate.wpc_modules.config import (
    ClimateSettings,
    load_wp_cli_model,
    prepare_layout,
)
from wpclimate.wpc_modules.errors import ClimateError
from wpclimate.wpc_modules.git import GIT_FAMILY
from wpclimate.wpc_modules.git.context import GitContext
from wpclimate.wpc_modules.git.credentials import Credential, load_credential
from wpclimate.wpc_modules.mateflow.executor import FamilyBinding, MateFlowExecutor
from wpclimate.wpc_modules.mateflow.store import MateFlowStore
from wpclimate.wpc_modules.wp import WP_FAMILY
from wpclimate.wpc_modules.wp.context import WpCliContext, WpCliModel

logger = logging.getLogger(__name__)


def build_registry() -> CommandRegistry:
    """Registry over both command families. Not yet initialized."""
    return CommandRegistry((WP_FAMILY, GIT_FAMILY))


@dataclass(frozen=True)
class ClimateApp:
    settings: ClimateSettings
    registry: CommandRegistry
    store: MateFlowStore
    executor: MateFlowExecutor


def _assemble(
    settings: ClimateSettings,
    registry: CommandRegistry,
    model: WpCliModel,
    credential: Credential | None,
    store: MateFlowStore,
) -> ClimateApp:
    wp_context = WpCliContext(
        model=model,
        working_directory=settings.working_directory,
        dump_directory=settings.dump_directory,
    )
    git_context = GitContext(
        working_directory=settings.working_directory,
        credential=credential,
    )
    executor = MateFlowExecutor({
        CommandGroup.WP: FamilyBinding(
            CommandFactory(registry, CommandGroup.WP), wp_context,
        ),
        CommandGroup.GIT: FamilyBinding(
            CommandFactory(registry, CommandGroup.GIT), git_context,
        ),
    })
    logger.debug("Application assembled for %s", settings.working_directory)
    return ClimateApp(settings, registry, store, executor)


def build_app(
    settings: ClimateSettings,
    registry: CommandRegistry | None = None,
) -> IOResult[ClimateApp, ClimateError]:
    """Prepare the settings layout and assemble the application."""
    registry = registry or build_registry()
    registry.initialize()

    layout = prepare_layout(settings)
    if isinstance(layout, IOFailure):
        return layout

    model_result = load_wp_cli_model(settings)
    if isinstance(model_result, IOFailure):
        return model_result

    credential_result = load_credential(settings.git_config_file)
    if isinstance(credential_result, IOFailure):
        return credential_result

    store_result = MateFlowStore.open(settings.workflow_directory)
    if isinstance(store_result, IOFailure):
        return store_result

    return IOSuccess(
        _assemble(
            settings,
            registry,
            unsafe_perform_io(model_result.unwrap()),
            unsafe_perform_io(credential_result.unwrap()),
            unsafe_perform_io(store_result.unwrap()),
        ),
    )
