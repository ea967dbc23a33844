"""Structured error type shared by the registry, commands, store and executor."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field


class ErrorType:
    """Known error_type values, grouped by where they originate."""

    # Catalog
    COMMAND_NOT_FOUND = "CommandNotFoundError"
    COMMAND_INSTANTIATION = "CommandInstantiationError"

    # Preconditions
    PHP_NOT_INSTALLED = "PHPNotInstalledError"
    WPCLI_NOT_INSTALLED = "WPCliNotInstalledError"
    NOT_A_WORDPRESS_DIRECTORY = "NotAWordPressDirectoryError"
    GIT_NOT_INSTALLED = "GitNotInstalledError"
    CONFIGURATION_MISSING = "ConfigurationMissingError"

    # Persistence
    FLOW_NOT_FOUND = "FlowNotFoundError"
    FLOW_PARSE = "FlowParseError"
    INVALID_FLOW_NAME = "InvalidFlowNameError"


@dataclass(frozen=True)
class ClimateError:
    """Failure value carried inside IOFailure.

    source names the component that produced the error
    (e.g. "commands.factory", "io_ops.read_file").
    """

    source: str
    error_type: str
    message: str
    context: dict[str, object] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        """Return plain dict suitable for JSON serialization.

        Non-serializable context values are converted to string representations.
        """
        data = asdict(self)

        def make_safe(obj: object) -> object:
            if isinstance(obj, (str, int, float, bool, type(None))):
                return obj
            if isinstance(obj, (list, tuple)):
                return [make_safe(x) for x in obj]
            if isinstance(obj, dict):
                return {str(k): make_safe(v) for k, v in obj.items()}
            return str(obj)

        data["context"] = make_safe(self.context)
        return data

    def __str__(self) -> str:
        """Human-readable error representation for logging."""
        max_len = 300
        base = f"{self.error_type} [{self.source}]: {self.message}"
        if self.context:
            ctx_str = str(self.context)
            if len(ctx_str) > max_len:
                ctx_str = ctx_str[: max_len - 3] + "..."
            base += f" | context={ctx_str}"
        return base
