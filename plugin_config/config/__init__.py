"""Configuration loading and environment override module."""

from plugin_config.config.cast import Duration, parse_duration
from plugin_config.config.contracts import Configurer
from plugin_config.config.errors import (
    ConfigError,
    DecodeError,
    ErrorKind,
    InitializationError,
)
from plugin_config.config.expand import expand_env
from plugin_config.config.plugin import ConfigPlugin
from plugin_config.config.state_machine import ConfigStateError, PluginState
from plugin_config.config.store import LayeredStore, Source


__all__ = [
    "ConfigError",
    "ConfigPlugin",
    "ConfigStateError",
    "Configurer",
    "DecodeError",
    "Duration",
    "ErrorKind",
    "InitializationError",
    "LayeredStore",
    "PluginState",
    "Source",
    "expand_env",
    "parse_duration",
]
