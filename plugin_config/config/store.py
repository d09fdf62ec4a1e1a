"""Layered hierarchical key/value store.

Values are looked up by dotted, case-insensitive key through four layers,
highest priority first:

    override     values set programmatically
    environment  PREFIX_KEY_SUBKEY variables, looked up on demand
    file         the parsed configuration file
    default      fallbacks registered by the host

A scalar in a higher layer shadows deeper keys below the same path in
lower layers.
"""

import os
import threading
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import AbstractSet, Any

import structlog

from plugin_config.config.constants import (
    COMPONENT_STORE,
    ENV_SEPARATOR,
    KEY_DELIMITER,
)
from plugin_config.config.readers import read_config_file


logger = structlog.get_logger()

_MISSING = object()


class Source(str, Enum):
    """Layer that provides a value."""

    OVERRIDE = "override"
    ENV = "env"
    FILE = "file"
    DEFAULT = "default"


def _lower_keys(value: Any) -> Any:
    """Recursively lower-case mapping keys; other values pass through."""
    if isinstance(value, Mapping):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value


def _split(key: str) -> list[str]:
    return key.lower().split(KEY_DELIMITER)


_SHADOWED = object()


def _search(layer: Any, path: list[str]) -> Any:
    """Walk a nested mapping.

    Mapping keys may themselves contain dots (``{"log.level": ...}``), so
    every joined prefix of the path is tried, longest first.

    Returns:
        The value at path, _MISSING, or _SHADOWED when a scalar sits above
        the end of the path.
    """
    if not path:
        return layer
    if not isinstance(layer, Mapping):
        return _SHADOWED

    result = _MISSING
    for end in range(len(path), 0, -1):
        prefix = KEY_DELIMITER.join(path[:end])
        if prefix not in layer:
            continue
        found = _search(layer[prefix], path[end:])
        if found is _SHADOWED:
            result = _SHADOWED
        elif found is not _MISSING:
            return found
    return result


def _flatten(layer: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten a nested mapping into dotted leaf keys."""
    leaves: dict[str, Any] = {}
    for key, value in layer.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, Mapping):
            leaves.update(_flatten(value, f"{full_key}{KEY_DELIMITER}"))
        else:
            leaves[full_key] = value
    return leaves


def _insert(layer: dict[str, Any], path: list[str], value: Any) -> None:
    """Insert a value at path, replacing scalars met on the way."""
    current = layer
    for part in path[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[path[-1]] = value


class LayeredStore:
    """Hierarchical configuration store with automatic environment lookup."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        """Initialize an empty store.

        Args:
            environ: Environment used for automatic overrides, defaults to
                ``os.environ``.
        """
        self._environ = os.environ if environ is None else environ
        self._lock = threading.RLock()
        self._override: dict[str, Any] = {}
        self._file: dict[str, Any] = {}
        self._defaults: dict[str, Any] = {}
        self._config_file: Path | None = None
        self._env_prefix = ""
        self._automatic_env = False
        self._env_key_replacements: dict[str, str] = {}

    @property
    def config_file(self) -> Path | None:
        """Path of the configuration file, if one was set."""
        return self._config_file

    def set_config_file(self, path: str | Path) -> None:
        """Set the file read by ``read_in_config``."""
        self._config_file = Path(path)

    def set_env_prefix(self, prefix: str) -> None:
        """Set the prefix prepended to environment variable names."""
        self._env_prefix = prefix

    def automatic_env(self) -> None:
        """Enable on-demand environment lookup for every key."""
        self._automatic_env = True

    def set_env_key_replacer(self, replacements: Mapping[str, str]) -> None:
        """Set characters replaced when a key is turned into a variable name."""
        self._env_key_replacements = dict(replacements)

    def env_var_name(self, key: str) -> str:
        """Build the environment variable name overriding a key.

        Args:
            key: Dotted key, e.g. ``db.max-conns``.

        Returns:
            Variable name, e.g. ``APP_DB_MAX_CONNS`` for prefix ``app``.
            Replacements apply to the prefix too, so prefix ``my-app``
            gives ``MY_APP_DB_MAX_CONNS``.
        """
        name = key
        if self._env_prefix:
            name = f"{self._env_prefix}{ENV_SEPARATOR}{name}"
        for old, new in self._env_key_replacements.items():
            name = name.replace(old, new)
        return name.upper()

    def read_in_config(self) -> None:
        """Read the configuration file into the file layer.

        Raises:
            ValueError: If no configuration file was set.
            FileNotFoundError: If the file does not exist.
            UnsupportedConfigTypeError: If the extension is not supported.
        """
        if self._config_file is None:
            raise ValueError("config file is not set")

        parsed = read_config_file(self._config_file)
        with self._lock:
            self._file = _lower_keys(parsed)

        logger.debug(
            "config_file_parsed",
            component=COMPONENT_STORE,
            file_path=str(self._config_file),
            top_level_keys=sorted(self._file),
        )

    def _env_lookup(self, key: str) -> Any:
        if not self._automatic_env:
            return _MISSING
        value = self._environ.get(self.env_var_name(key))
        # Empty variables count as unset
        if not value:
            return _MISSING
        return value

    def _find(self, key: str) -> tuple[Source | None, Any]:
        path = _split(key)
        lowered = KEY_DELIMITER.join(path)

        with self._lock:
            found = _search(self._override, path)
            if found is _SHADOWED:
                return None, _MISSING
            if found is not _MISSING:
                return Source.OVERRIDE, found

            found = self._env_lookup(lowered)
            if found is not _MISSING:
                return Source.ENV, found

            for source, layer in ((Source.FILE, self._file), (Source.DEFAULT, self._defaults)):
                found = _search(layer, path)
                if found is _SHADOWED:
                    return None, _MISSING
                if found is not _MISSING:
                    return source, found

        return None, _MISSING

    def source_of(self, key: str) -> Source | None:
        """Tell which layer provides the effective value of a key.

        Returns:
            The providing layer, or None if the key is absent.
        """
        source, _ = self._find(key)
        return source

    def get(self, key: str) -> Any:
        """Get the effective value of a key.

        Parent keys return a nested dict merged across all layers, with
        environment overrides applied to known leaves.

        Args:
            key: Dotted key.

        Returns:
            The value, or None if the key is absent.
        """
        _, value = self._find(key)
        if value is _MISSING:
            return None
        if isinstance(value, Mapping):
            return self._subtree(key)
        return value

    def is_set(self, key: str) -> bool:
        """Check whether a key has a value from override, environment or file."""
        source = self.source_of(key)
        return source is not None and source != Source.DEFAULT

    def set(self, key: str, value: Any) -> None:
        """Set a value in the override layer."""
        with self._lock:
            _insert(self._override, _split(key), _lower_keys(value))

    def set_default(self, key: str, value: Any) -> None:
        """Set a value in the default layer."""
        with self._lock:
            _insert(self._defaults, _split(key), _lower_keys(value))

    def all_keys(self) -> list[str]:
        """List every leaf key known to the store.

        Returns:
            Sorted dotted keys from the override, file and default layers.
            Keys shadowed by a higher-priority layer are left out.
        """
        with self._lock:
            layers = [self._override, self._file, self._defaults]
            keys: set[str] = set()
            for layer in layers:
                for key in _flatten(layer):
                    if not self._shadowed(key, keys):
                        keys.add(key)
        return sorted(keys)

    @staticmethod
    def _shadowed(key: str, known: AbstractSet[str]) -> bool:
        parts = key.split(KEY_DELIMITER)
        for end in range(1, len(parts)):
            if KEY_DELIMITER.join(parts[:end]) in known:
                return True
        nested_prefix = f"{key}{KEY_DELIMITER}"
        return any(existing.startswith(nested_prefix) for existing in known)

    def all_settings(self) -> dict[str, Any]:
        """Build the merged nested mapping of every key."""
        settings: dict[str, Any] = {}
        for key in self.all_keys():
            _insert(settings, key.split(KEY_DELIMITER), self.get(key))
        return settings

    def _subtree(self, key: str) -> dict[str, Any]:
        prefix = f"{KEY_DELIMITER.join(_split(key))}{KEY_DELIMITER}"
        subtree: dict[str, Any] = {}
        for leaf in self.all_keys():
            if leaf.startswith(prefix):
                _insert(subtree, leaf[len(prefix) :].split(KEY_DELIMITER), self.get(leaf))
        return subtree
