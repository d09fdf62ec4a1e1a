"""Observability module for logging and metrics."""

from plugin_config.observability.logging import bind_plugin_context, configure_logging
from plugin_config.observability.metrics import ConfigMetrics


__all__ = [
    "ConfigMetrics",
    "bind_plugin_context",
    "configure_logging",
]
