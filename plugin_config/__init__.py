"""Configuration plugin for modular application runtimes."""

from plugin_config.config import (
    ConfigError,
    ConfigPlugin,
    Configurer,
    DecodeError,
    InitializationError,
)
from plugin_config.settings import PluginSettings


__all__ = [
    "ConfigError",
    "ConfigPlugin",
    "Configurer",
    "DecodeError",
    "InitializationError",
    "PluginSettings",
]
