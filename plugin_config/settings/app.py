"""Plugin settings powered by Pydantic BaseSettings."""

from datetime import timedelta

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from plugin_config.config.cast import Duration


class PluginSettings(BaseSettings):
    """Settings the host hands to the configuration plugin.

    Values passed to the constructor win over CONFIG_PLUGIN_* variables.
    ``path`` and ``prefix`` may be empty here; the plugin rejects empty
    values when it is initialized.
    """

    model_config = SettingsConfigDict(
        env_prefix="CONFIG_PLUGIN_",
        case_sensitive=False,
        frozen=True,
    )

    path: str = Field(default="", description="Configuration file to load.")
    prefix: str = Field(default="", description="Environment variable prefix.")
    version: str = Field(default="", description="Application version.")
    cmd: str = Field(default="", description="CLI command being run.")
    timeout: Duration = Field(
        default=timedelta(0),
        description="Graceful shutdown timeout reported to the host.",
    )
