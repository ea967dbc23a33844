"""Per-family command factory.

Turns a command name plus a parameter bag into a command bound to
its family context. Construction follows the calling convention
recorded on the catalog entry; it is never probed.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from returns.io import IOFailure, IOResult, IOSuccess

from wpclimate.wpc_modules.commands.registry import typed_constructor_params
from wpclimate.wpc_modules.commands.types import CallingConvention
from wpclimate.wpc_modules.errors import ClimateError, ErrorType

if TYPE_CHECKING:
    from collections.abc import Mapping

    from wpclimate.wpc_modules.commands.base import BaseCommand
    from wpclimate.wpc_modules.commands.registry import CommandRegistry
    from wpclimate.wpc_modules.commands.types import CommandGroup, CommandInfo

logger = logging.getLogger(__name__)


def _construct(
    info: CommandInfo,
    context: object,
    params: dict[str, object],
) -> BaseCommand:
    if info.convention is CallingConvention.BAG:
        return info.implementation(context, params)
    if info.convention is CallingConvention.CONTEXT_ONLY:
        return info.implementation(context)
    kwargs: dict[str, object] = {}
    for arg, param in typed_constructor_params(info.implementation).items():
        raw = params.get(param.name)
        if raw is not None:
            kwargs[arg] = param.coerce(raw)
            continue
        if param.required:
            msg = f"Missing required parameter '{param.name}'"
            raise ValueError(msg)
        default = param.default()
        if default is not None:
            kwargs[arg] = default
    return info.implementation(context, **kwargs)


class CommandFactory:
    """Creates commands of one group from the shared registry."""

    def __init__(self, registry: CommandRegistry, group: CommandGroup) -> None:
        self._registry = registry
        self.group = group

    def create(
        self,
        name: str,
        context: object,
        params: Mapping[str, object] | None = None,
    ) -> IOResult[BaseCommand, ClimateError]:
        """Build the named command. Returns IOResult, never raises."""
        info = self._registry.get_command(name, self.group)
        if info is None:
            available = sorted(self._registry.get_commands_by_group(self.group))
            return IOFailure(
                ClimateError(
                    source="commands.factory",
                    error_type=ErrorType.COMMAND_NOT_FOUND,
                    message=(
                        f"Command not found: {name}."
                        f" Available: {available}"
                    ),
                    context={"command": name, "group": self.group.value},
                ),
            )
        try:
            command = _construct(info, context, dict(params or {}))
        except Exception as exc:  # noqa: BLE001
            logger.debug("Failed to construct %s", info, exc_info=True)
            return IOFailure(
                ClimateError(
                    source="commands.factory",
                    error_type=ErrorType.COMMAND_INSTANTIATION,
                    message=f"Cannot create command {name}: {exc}",
                    context={
                        "command": name,
                        "group": self.group.value,
                        "exception_type": type(exc).__name__,
                    },
                ),
            )
        return IOSuccess(command)
