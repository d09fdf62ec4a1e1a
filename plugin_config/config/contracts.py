"""Protocol interface dependent plugins rely on."""

from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Protocol, TypeVar, runtime_checkable


T = TypeVar("T")


@runtime_checkable
class Configurer(Protocol):
    """Protocol for configuration providers.

    Plugins that need configuration declare a dependency on a
    ``Configurer`` and read their own section through it, regardless of
    where the values came from (file, environment or overwrite).
    """

    def name(self) -> str:
        """Identifier the provider is registered under."""
        ...

    def unmarshal_key(self, name: str, target: type[T]) -> T:
        """Decode the section at a dotted key into ``target``.

        Raises:
            DecodeError: If the section does not fit the target.
        """
        ...

    def unmarshal(self, target: type[T]) -> T:
        """Decode the whole configuration into ``target``.

        Raises:
            DecodeError: If the configuration does not fit the target.
        """
        ...

    def overwrite(self, values: Mapping[str, Any]) -> None:
        """Override values for the given dotted keys."""
        ...

    def get(self, name: str) -> Any:
        """Raw value at a dotted key, None when absent."""
        ...

    def has(self, name: str) -> bool:
        """Whether a dotted key was set by file, environment or overwrite."""
        ...

    def get_version(self) -> str:
        """Application version."""
        ...

    def get_cmd(self) -> str:
        """CLI command being run."""
        ...

    def graceful_timeout(self) -> timedelta:
        """Graceful shutdown timeout for the host's servers."""
        ...
