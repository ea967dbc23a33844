"""Command metadata model: groups, parameter declarations, catalog entries.

Parameters are declared with typing.Annotated, either on the
constructor arguments of a command (typed commands) or on the
class-level field annotations (commands that take a loose
parameter bag):

    old_value: Annotated[str, Param("oldValue", required=True)]

The registry reads these declarations to build the catalog.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class CommandGroup(str, Enum):
    """The two independent command families."""

    WP = "WP"
    GIT = "GIT"

    @classmethod
    def parse(cls, value: object) -> CommandGroup | None:
        """Case-insensitive lookup. Returns None for unknown groups."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class ParamKind(str, Enum):
    """Declared type of a command parameter."""

    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    PATH = "PATH"


class CallingConvention(str, Enum):
    """How the factory constructs a command.

    TYPED: one constructor argument per declared parameter.
    BAG: constructor takes (context, params).
    CONTEXT_ONLY: constructor takes (context).
    """

    TYPED = "TYPED"
    BAG = "BAG"
    CONTEXT_ONLY = "CONTEXT_ONLY"


@dataclass(frozen=True)
class Param:
    """Declared metadata for one command parameter (ParamInfo).

    default_value is a string as it would be typed by a user;
    an empty string means "no default".
    """

    name: str
    kind: ParamKind = ParamKind.STRING
    required: bool = False
    default_value: str = ""
    description: str = ""

    def coerce(self, value: object) -> object:
        """Convert a raw bag value to this parameter's Python type.

        Raises:
            TypeError: If the value cannot represent this kind.
            ValueError: If a numeric string does not parse.
        """
        if self.kind is ParamKind.BOOLEAN:
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                return value.strip().lower() == "true"
            if isinstance(value, (int, float)):
                return bool(value)
        elif self.kind is ParamKind.INTEGER:
            if isinstance(value, (int, float, str)) and not isinstance(value, bool):
                return int(value)
        elif self.kind is ParamKind.FLOAT:
            if isinstance(value, (int, float, str)) and not isinstance(value, bool):
                return float(value)
        elif self.kind is ParamKind.PATH:
            if isinstance(value, (list, tuple)):
                return [str(item) for item in value]
            if isinstance(value, str):
                return value
        elif isinstance(value, (str, int, float, bool)):
            return str(value)
        msg = (
            f"Parameter '{self.name}' expects {self.kind.value},"
            f" got {type(value).__name__}"
        )
        raise TypeError(msg)

    def default(self) -> object | None:
        """Return the coerced default, or None when there is none."""
        if self.required or self.default_value == "":
            return None
        return self.coerce(self.default_value)

    def __str__(self) -> str:
        suffix = " (required)" if self.required else ""
        return f"{self.name}{suffix}: {self.description}"


@dataclass(frozen=True)
class CommandSpec:
    """One row of a family's registration table."""

    name: str
    implementation: type
    convention: CallingConvention
    description: str = ""


@dataclass(frozen=True)
class CommandFamily:
    """A command family: its group, base class and registration table."""

    group: CommandGroup
    base: type
    commands: tuple[CommandSpec, ...] = ()


@dataclass(frozen=True)
class CommandInfo:
    """Catalog entry built by the registry. Read-only once created."""

    name: str
    group: CommandGroup
    implementation: type
    convention: CallingConvention
    parameters: Mapping[str, Param] = field(
        default_factory=lambda: MappingProxyType({}),
    )
    description: str = ""

    def required_parameters(self) -> list[Param]:
        """Return the required parameters in declaration order."""
        return [p for p in self.parameters.values() if p.required]

    def __str__(self) -> str:
        return f"{self.name} ({self.group.value})"
