"""Configuration file readers selected by file extension."""

import json
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

from plugin_config.config.constants import (
    JSON_EXTENSIONS,
    TOML_EXTENSIONS,
    YAML_EXTENSIONS,
)


class UnsupportedConfigTypeError(ValueError):
    """Raised when the file extension maps to no known format."""

    def __init__(self, path: Path) -> None:
        """Initialize the error.

        Args:
            path: Path with the unsupported extension.
        """
        self.path = path
        super().__init__(f"Unsupported config type: {path.suffix or '<none>'} ({path})")


class ConfigParseError(ValueError):
    """Raised when a file parses but its top level is not a mapping."""

    def __init__(self, path: Path, found: str) -> None:
        """Initialize the error.

        Args:
            path: Path of the offending file.
            found: Name of the type found at the top level.
        """
        self.path = path
        super().__init__(f"Top level of {path} must be a mapping, got {found}")


def _parse_yaml(content: str) -> object:
    return yaml.safe_load(content)


def _parse_json(content: str) -> object:
    return json.loads(content)


def _parse_toml(content: str) -> object:
    return tomllib.loads(content)


def _parser_for(path: Path) -> Callable[[str], object]:
    suffix = path.suffix.lower()
    if suffix in YAML_EXTENSIONS:
        return _parse_yaml
    if suffix in JSON_EXTENSIONS:
        return _parse_json
    if suffix in TOML_EXTENSIONS:
        return _parse_toml
    raise UnsupportedConfigTypeError(path)


def read_config_file(path: Path) -> dict[str, Any]:
    """Read and parse a configuration file.

    Args:
        path: File to read; the format follows its extension.

    Returns:
        Parsed top-level mapping. An empty document yields an empty dict.

    Raises:
        UnsupportedConfigTypeError: If the extension is not supported.
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If YAML parsing fails.
        json.JSONDecodeError: If JSON parsing fails.
        tomllib.TOMLDecodeError: If TOML parsing fails.
        ConfigParseError: If the top level is not a mapping.
    """
    parser = _parser_for(path)
    content = path.read_bytes().decode("utf-8")
    parsed = parser(content)

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigParseError(path, type(parsed).__name__)
    return parsed
