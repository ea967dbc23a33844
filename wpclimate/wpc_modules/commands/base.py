"""Root of the command hierarchy."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from returns.io import IOResult, IOSuccess

if TYPE_CHECKING:
    from collections.abc import Mapping

    from wpclimate.wpc_modules.commands.types import Param
    from wpclimate.wpc_modules.errors import ClimateError
    from wpclimate.wpc_modules.types import CommandOutput


class BaseCommand(ABC):
    """A runnable unit bound to its family context.

    Subclasses implement run(). Family bases override
    check_preconditions() with their dependency checks.
    """

    def __init__(self, context: object) -> None:
        self.context = context

    def execute(self) -> IOResult[CommandOutput, ClimateError]:
        """Check preconditions, then run. Never raises."""
        return self.check_preconditions().bind(lambda _: self.run())

    def check_preconditions(self) -> IOResult[None, ClimateError]:
        return IOSuccess(None)

    @abstractmethod
    def run(self) -> IOResult[CommandOutput, ClimateError]:
        """Perform the command's work."""


def bag_value(params: Mapping[str, object] | None, param: Param) -> object | None:
    """Pull one declared parameter out of a loose parameter bag.

    Applies the declared default when the key is absent.

    Raises:
        ValueError: If a required parameter is missing.
    """
    raw = params.get(param.name) if params else None
    if raw is None:
        if param.required:
            msg = f"Missing required parameter '{param.name}'"
            raise ValueError(msg)
        return param.default()
    return param.coerce(raw)
