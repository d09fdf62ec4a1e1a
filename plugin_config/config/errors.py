"""Error types for the configuration plugin.

Every error carries an operation tag naming the plugin method that
produced it, so hosts that wrap errors can tell where a failure came from.
"""

from enum import Enum

from pydantic import ValidationError

from plugin_config.config.error_hints import format_validation_error


class ErrorKind(str, Enum):
    """Classification of configuration errors.

    - INIT: the plugin could not be initialized (fatal for the host)
    - DECODE: a configuration section does not fit the requested shape
    """

    INIT = "INIT"
    DECODE = "DECODE"


class ConfigError(Exception):
    """Base exception for configuration plugin errors."""

    def __init__(self, op: str, kind: ErrorKind, message: str) -> None:
        """Initialize the error.

        Args:
            op: Operation tag, e.g. "config plugin init".
            kind: Classification of the error.
            message: Human-readable error message.
        """
        super().__init__(f"{op}: {message}")
        self.op = op
        self.kind = kind
        self.message = message

    def to_dict(self) -> dict[str, str | int]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error.
        """
        return {
            "op": self.op,
            "kind": self.kind.value,
            "message": self.message,
        }


class InitializationError(ConfigError):
    """Raised when the plugin cannot start.

    Covers missing required settings and file read or parse failures.
    The underlying exception, if any, is chained as ``__cause__``.
    """

    def __init__(self, op: str, message: str) -> None:
        """Initialize the error.

        Args:
            op: Operation tag.
            message: Human-readable error message.
        """
        super().__init__(op, ErrorKind.INIT, message)


class DecodeError(ConfigError):
    """Raised when a configuration section cannot be decoded into a target.

    Wraps the pydantic ``ValidationError`` and keeps its message. A target
    pydantic cannot build a schema for is wrapped too; ``errors`` is then
    empty.
    """

    def __init__(self, op: str, key: str | None, error: Exception) -> None:
        """Initialize the error.

        Args:
            op: Operation tag.
            key: Dotted key that was decoded, None for the whole store.
            error: The underlying validation or schema error.
        """
        super().__init__(op, ErrorKind.DECODE, str(error))
        self.key = key
        self.errors: list[dict[str, str]] = []
        if isinstance(error, ValidationError):
            self.errors = [
                {
                    "loc": ".".join(str(loc) for loc in err["loc"]),
                    "msg": err["msg"],
                    "type": err["type"],
                }
                for err in error.errors()
            ]

    def format_errors(self, *, include_hint: bool = True) -> list[str]:
        """Format each field error with its location.

        Args:
            include_hint: Whether to append a remediation hint.

        Returns:
            One formatted string per field error.
        """
        prefix = f"{self.key}." if self.key else ""
        return [
            format_validation_error(
                f"{prefix}{err['loc']}" if err["loc"] else self.key or "<root>",
                err["msg"],
                err["type"],
                include_hint=include_hint,
            )
            for err in self.errors
        ]

    def to_dict(self) -> dict[str, str | int]:
        """Convert error to dictionary for logging."""
        data = super().to_dict()
        data["key"] = self.key or ""
        data["error_count"] = len(self.errors)
        return data
