"""Construction-time settings for the configuration plugin."""

from .app import PluginSettings


__all__ = ["PluginSettings"]
