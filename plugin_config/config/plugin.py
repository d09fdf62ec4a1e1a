"""Configuration plugin: file + environment backed configuration provider."""

import dataclasses
import json
import time
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, NoReturn, TypeVar

import structlog
import yaml
from pydantic import BaseModel, PydanticUserError, TypeAdapter, ValidationError

from plugin_config.config.cast import (
    to_bool,
    to_duration,
    to_float,
    to_int,
    to_string,
    to_string_list,
    to_string_map,
)
from plugin_config.config.constants import (
    COMPONENT_CONFIG,
    ENV_KEY_REPLACEMENTS,
    OP_INIT,
    OP_UNMARSHAL,
    OP_UNMARSHAL_KEY,
    PLUGIN_NAME,
)
from plugin_config.config.errors import DecodeError, InitializationError
from plugin_config.config.expand import expand_env
from plugin_config.config.state_machine import PluginState, PluginStateMachine
from plugin_config.config.store import LayeredStore, Source
from plugin_config.observability.logging import bind_plugin_context
from plugin_config.observability.metrics import ConfigMetrics
from plugin_config.settings import PluginSettings


logger = structlog.get_logger()

T = TypeVar("T")


class ConfigPlugin:
    """Configuration provider for a plugin-based host.

    Reads one configuration file, lets ``PREFIX_KEY_SUBKEY`` environment
    variables override its keys, expands ``$NAME`` / ``${NAME}``
    placeholders in string values and serves the result to other plugins.

    Lifecycle: UNINITIALIZED -> LOADING -> READY (or FAILED). The host
    calls ``init`` once before any read; reads may then run concurrently.
    """

    def __init__(
        self,
        settings: PluginSettings,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the plugin.

        Args:
            settings: Construction-time settings.
            environ: Environment used for overrides and expansion, defaults
                to ``os.environ``.
        """
        self._settings = settings
        self._environ = environ
        self._store = LayeredStore(environ=environ)
        self._state_machine = PluginStateMachine()
        self._metrics = ConfigMetrics()

    @classmethod
    def from_settings(cls, **fields: Any) -> "ConfigPlugin":
        """Build a plugin from settings fields (path, prefix, version, cmd, timeout)."""
        return cls(PluginSettings(**fields))

    @property
    def state(self) -> PluginState:
        """Get the current lifecycle state."""
        return self._state_machine.state

    @property
    def settings(self) -> PluginSettings:
        """Get the construction-time settings."""
        return self._settings

    @property
    def metrics(self) -> ConfigMetrics:
        """Get the plugin metrics."""
        return self._metrics

    def init(self) -> None:
        """Load the configuration file and apply environment overrides.

        Raises:
            InitializationError: If prefix or path is empty, the file cannot
                be read or parsed, or the plugin was already initialized.
        """
        start_time = time.perf_counter()
        log = logger.bind(
            component=COMPONENT_CONFIG,
            file_path=self._settings.path,
            env_prefix=self._settings.prefix,
        )

        if self._state_machine.state != PluginState.UNINITIALIZED:
            raise InitializationError(
                OP_INIT, f"plugin already initialized (state {self.state.name})"
            )

        self._state_machine.transition(PluginState.LOADING)
        bind_plugin_context(cmd=self._settings.cmd, version=self._settings.version)
        log.info("config_init_started", phase="LOADING")

        self._store.automatic_env()
        self._store.set_env_key_replacer(ENV_KEY_REPLACEMENTS)

        if not self._settings.prefix:
            self._fail(log, InitializationError(OP_INIT, "prefix should be set"))
        self._store.set_env_prefix(self._settings.prefix)

        if not self._settings.path:
            self._fail(log, InitializationError(OP_INIT, "path should be set"))
        self._store.set_config_file(self._settings.path)

        try:
            self._store.read_in_config()
        except (OSError, ValueError, yaml.YAMLError) as e:
            self._fail(log, InitializationError(OP_INIT, str(e)), cause=e)

        keys = self._store.all_keys()
        self._metrics.record_keys_loaded(len(keys))
        log.info("config_file_loaded", key_count=len(keys))

        self._expand_all(keys)

        self._state_machine.transition(PluginState.READY)
        self._metrics.record_init_duration((time.perf_counter() - start_time) * 1000)
        log.info(
            "config_ready",
            phase="READY",
            key_count=len(keys),
            keys_expanded=self._metrics.keys_expanded,
            env_overrides=self._metrics.env_overrides,
            init_duration_ms=self._metrics.init_duration_ms,
        )

    def _fail(
        self,
        log: structlog.stdlib.BoundLogger,
        error: InitializationError,
        cause: BaseException | None = None,
    ) -> NoReturn:
        """Move to FAILED, log and raise."""
        self._state_machine.transition(PluginState.FAILED)
        log.error("config_init_failed", phase="FAILED", **error.to_dict())
        raise error from cause

    def _expand_all(self, keys: list[str]) -> None:
        """Expand placeholders in every leaf and pin the effective values.

        Values from file or environment are written to the override layer, so
        later changes to the process environment do not alter them. Values
        that only exist as defaults stay in the default layer.
        """
        for key in keys:
            source = self._store.source_of(key)
            if source is None:
                continue
            value = self._store.get(key)
            expanded = self._expand_value(value)

            if source == Source.ENV:
                self._metrics.record_env_override()
            if expanded != value:
                self._metrics.record_key_expanded()
                logger.debug("config_env_expanded", component=COMPONENT_CONFIG, key=key)

            if source == Source.DEFAULT:
                self._store.set_default(key, expanded)
            else:
                self._store.set(key, expanded)

    def _expand_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return expand_env(value, self._environ)
        if isinstance(value, list):
            # Lists holding anything but strings are kept as they are
            if not all(isinstance(item, str) for item in value):
                return value
            return [expand_env(item, self._environ) for item in value]
        return value

    def unmarshal_key(self, name: str, target: type[T] | T) -> T:
        """Decode the section at a dotted key.

        Args:
            name: Dotted key of the section.
            target: Type to build (pydantic model, dataclass, TypedDict,
                container...) or a model/dataclass instance whose field
                values act as defaults.

        Returns:
            The decoded value. An absent section decodes an empty mapping
            for a type target and returns an instance target unchanged.

        Raises:
            DecodeError: If the section does not fit the target, or the
                target is not a type pydantic can build.
        """
        self._state_machine.require_ready()
        section = self._store.get(name)
        return self._decode(OP_UNMARSHAL_KEY, name, section, target)

    def unmarshal(self, target: type[T] | T) -> T:
        """Decode the whole configuration.

        Args:
            target: Same as for ``unmarshal_key``.

        Returns:
            The decoded value.

        Raises:
            DecodeError: If the configuration does not fit the target, or
                the target is not a type pydantic can build.
        """
        self._state_machine.require_ready()
        return self._decode(OP_UNMARSHAL, None, self._store.all_settings(), target)

    def _decode(self, op: str, key: str | None, data: Any, target: Any) -> Any:
        try:
            if not _is_instance_target(target):
                payload = {} if data is None else data
                adapter: TypeAdapter[Any] = TypeAdapter(target)
            else:
                if data is None:
                    return target
                payload = {**_instance_fields(target), **data} if isinstance(data, Mapping) else data
                adapter = TypeAdapter(type(target))
            return adapter.validate_python(payload)
        except (ValidationError, PydanticUserError) as e:
            error = DecodeError(op, key, e)
            self._metrics.record_decode_error()
            logger.warning("config_decode_failed", component=COMPONENT_CONFIG, **error.to_dict())
            raise error from e

    def overwrite(self, values: Mapping[str, Any]) -> None:
        """Override values for the given dotted keys.

        Never fails once the plugin is READY; the host only calls it after
        ``init``.

        Args:
            values: Mapping of dotted key to new value.

        Raises:
            ConfigStateError: If called before a successful ``init``.
        """
        self._state_machine.require_ready()
        for key, value in values.items():
            self._store.set(key, value)
        self._metrics.record_overwrite(len(values))
        logger.info(
            "config_overwritten",
            component=COMPONENT_CONFIG,
            keys=sorted(values),
        )

    def get(self, name: str) -> Any:
        """Get the raw value at a dotted key, None when absent.

        Never fails once the plugin is READY. Before ``init`` it raises
        ``ConfigStateError``, as every read does.
        """
        self._state_machine.require_ready()
        return self._store.get(name)

    def has(self, name: str) -> bool:
        """Check whether a key was set by file, environment or overwrite."""
        self._state_machine.require_ready()
        return self._store.is_set(name)

    def set_default(self, name: str, value: Any) -> None:
        """Register a fallback value; it does not make ``has`` true.

        May be called before ``init``.
        """
        self._store.set_default(name, value)

    def all_keys(self) -> list[str]:
        """List every known leaf key, sorted."""
        self._state_machine.require_ready()
        return self._store.all_keys()

    def all_settings(self) -> dict[str, Any]:
        """Get the merged configuration as a nested dict."""
        self._state_machine.require_ready()
        return self._store.all_settings()

    def get_string(self, name: str) -> str:
        return to_string(self.get(name))

    def get_int(self, name: str) -> int:
        return to_int(self.get(name))

    def get_float(self, name: str) -> float:
        return to_float(self.get(name))

    def get_bool(self, name: str) -> bool:
        return to_bool(self.get(name))

    def get_duration(self, name: str) -> timedelta:
        return to_duration(self.get(name))

    def get_string_list(self, name: str) -> list[str]:
        return to_string_list(self.get(name))

    def get_string_map(self, name: str) -> dict[str, Any]:
        return to_string_map(self.get(name))

    def get_version(self) -> str:
        """Get the application version."""
        return self._settings.version

    def get_cmd(self) -> str:
        """Get the CLI command name."""
        return self._settings.cmd

    def graceful_timeout(self) -> timedelta:
        """Get the graceful shutdown timeout for the host's servers."""
        return self._settings.timeout

    def name(self) -> str:
        """Get the plugin name."""
        return PLUGIN_NAME

    def get_summary(self) -> dict[str, object]:
        """Get a summary of the plugin state.

        Returns:
            Dictionary with state, settings and metrics.
        """
        return {
            "name": PLUGIN_NAME,
            "state": self.state.name,
            "file_path": self._settings.path,
            "env_prefix": self._settings.prefix,
            "version": self._settings.version,
            "cmd": self._settings.cmd,
            "metrics": self._metrics.to_dict(),
        }

    def get_summary_json(self) -> str:
        """Get the summary as JSON with stable ordering."""
        return json.dumps(self.get_summary(), sort_keys=True, indent=2)


def _is_instance_target(target: Any) -> bool:
    return isinstance(target, BaseModel) or (
        dataclasses.is_dataclass(target) and not isinstance(target, type)
    )


def _instance_fields(target: Any) -> dict[str, Any]:
    if isinstance(target, BaseModel):
        return target.model_dump()
    return dataclasses.asdict(target)
