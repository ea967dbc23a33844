"""Command registry: builds the catalog from family registration tables.

Each family contributes a tuple of CommandSpec rows. On first
initialize() the registry checks every row against its family
base class, extracts parameter metadata from the implementation
and files it under its group. Afterward the catalog is read-only;
lookups hand out MappingProxyType snapshots.
"""
from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Annotated, get_args, get_origin, get_type_hints

from wpclimate.wpc_modules.commands.types import (
    CommandGroup,
    CommandInfo,
    CommandSpec,
    Param,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from wpclimate.wpc_modules.commands.types import CommandFamily

logger = logging.getLogger(__name__)


def _param_of(hint: object) -> Param | None:
    """Return the Param attached to an Annotated hint, if any."""
    if get_origin(hint) is not Annotated:
        return None
    for meta in getattr(hint, "__metadata__", ()):
        if isinstance(meta, Param):
            return meta
    return None


def _is_mapping(hint: object) -> bool:
    """True if the hint names a Mapping or dict type."""
    if get_origin(hint) is Annotated:
        hint = get_args(hint)[0]
    origin = get_origin(hint) or hint
    return isinstance(origin, type) and issubclass(origin, Mapping)


def _constructor_hints(implementation: type) -> tuple[list[str], dict[str, object]]:
    """Argument names after the context, and their resolved hints."""
    names = list(inspect.signature(implementation).parameters)[1:]
    hints = get_type_hints(implementation.__init__, include_extras=True)
    return names, hints


def typed_constructor_params(implementation: type) -> dict[str, Param]:
    """Map constructor argument name to its Param, in declaration order."""
    names, hints = _constructor_hints(implementation)
    found: dict[str, Param] = {}
    for arg in names:
        param = _param_of(hints.get(arg))
        if param is not None:
            found[arg] = param
    return found


def _field_params(implementation: type) -> list[Param]:
    hints = get_type_hints(implementation, include_extras=True)
    return [p for p in (_param_of(h) for h in hints.values()) if p is not None]


def extract_params(implementation: type) -> dict[str, Param]:
    """Extract parameter metadata, keyed by Param.name.

    Precedence:
    1. Annotated constructor arguments after the context.
    2. If a constructor argument is a Mapping (parameter bag),
       Annotated class-level fields.
    3. Otherwise nothing.
    """
    typed = typed_constructor_params(implementation)
    if typed:
        return {p.name: p for p in typed.values()}
    names, hints = _constructor_hints(implementation)
    if any(_is_mapping(hints.get(arg)) for arg in names):
        return {p.name: p for p in _field_params(implementation)}
    return {}


class CommandRegistry:
    """Catalog of commands, keyed by group and name.

    Registration runs once, guarded by a lock. Registering a name
    twice within a group keeps the last entry and logs a warning.
    """

    def __init__(self, families: Iterable[CommandFamily]) -> None:
        self._families = tuple(families)
        self._bases = {family.group: family.base for family in self._families}
        self._commands: dict[CommandGroup, dict[str, CommandInfo]] = {
            group: {} for group in CommandGroup
        }
        self._lock = threading.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Populate the catalog. Later calls are no-ops."""
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            for family in self._families:
                for spec in family.commands:
                    self._register(family.group, family.base, spec)
            self._initialized = True
        logger.debug(
            "Command registry initialized: %s",
            {g.value: len(c) for g, c in self._commands.items()},
        )

    def register(self, group: CommandGroup, spec: CommandSpec) -> CommandInfo | None:
        """Add one entry after the family tables have been loaded.

        Returns the stored entry, or None if it was rejected.
        """
        self.initialize()
        base = self._bases.get(group)
        if base is None:
            logger.warning(
                "Skipping command '%s': no family registered for group %s",
                spec.name, group.value,
            )
            return None
        with self._lock:
            return self._register(group, base, spec)

    def _register(
        self,
        group: CommandGroup,
        base: type,
        spec: CommandSpec,
    ) -> CommandInfo | None:
        impl = spec.implementation
        if not (isinstance(impl, type) and issubclass(impl, base)):
            logger.warning(
                "Skipping %s command '%s': %r does not extend %s",
                group.value, spec.name, impl, base.__name__,
            )
            return None
        if inspect.isabstract(impl):
            logger.warning(
                "Skipping %s command '%s': %s is abstract",
                group.value, spec.name, impl.__name__,
            )
            return None
        try:
            params = extract_params(impl)
        except (NameError, TypeError, ValueError) as exc:
            logger.warning(
                "Skipping %s command '%s': cannot read parameters of %s: %s",
                group.value, spec.name, impl.__name__, exc,
            )
            return None
        table = self._commands[group]
        if spec.name in table:
            logger.warning(
                "Duplicate %s command '%s': %s replaces %s",
                group.value,
                spec.name,
                impl.__name__,
                table[spec.name].implementation.__name__,
            )
        info = CommandInfo(
            name=spec.name,
            group=group,
            implementation=impl,
            convention=spec.convention,
            parameters=MappingProxyType(params),
            description=spec.description,
        )
        table[spec.name] = info
        return info

    def get_all_commands(self) -> Mapping[str, CommandInfo]:
        """Return every command.

        A name present in several groups resolves to the first group
        in CommandGroup order (WP before GIT), as in get_command.
        """
        self.initialize()
        merged: dict[str, CommandInfo] = {}
        for group in CommandGroup:
            for name, info in self._commands[group].items():
                merged.setdefault(name, info)
        return MappingProxyType(merged)

    def get_command(
        self,
        name: str,
        group: CommandGroup | None = None,
    ) -> CommandInfo | None:
        """Look up a command by name, optionally within one group.

        Without a group the first group in CommandGroup order that has
        the name wins.
        """
        self.initialize()
        if group is not None:
            return self._commands[group].get(name)
        for command_group in CommandGroup:
            table = self._commands[command_group]
            if name in table:
                return table[name]
        return None

    def get_commands_by_group(
        self,
        group: CommandGroup,
    ) -> Mapping[str, CommandInfo]:
        """Return a read-only snapshot of one group's commands."""
        self.initialize()
        return MappingProxyType(dict(self._commands[group]))
