"""Integration tests for decoding configuration sections."""

from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import BaseModel, PydanticUserError

from plugin_config.config import ConfigPlugin, Configurer, DecodeError, Duration
from plugin_config.settings import PluginSettings


FIXTURES_DIR = Path(__file__).parent.parent / "fixtures" / "config"


class PoolConfig(BaseModel):
    """Worker pool section."""

    num_workers: int = 1
    debug: bool = False
    allocate_timeout: Duration = timedelta(seconds=10)


class HttpConfig(BaseModel):
    """HTTP section."""

    address: str = "127.0.0.1:8080"
    middleware: list[str] = []
    pool: PoolConfig = PoolConfig()


class DbConfig(BaseModel):
    """Database section."""

    host: str
    port: int


@dataclass
class LogsConfig:
    """Logs section as a dataclass."""

    mode: str = "development"
    level: str = "debug"
    channels: list[str] = field(default_factory=list)


class AppConfig(BaseModel):
    """Subset of the whole document."""

    version: str
    http: HttpConfig
    db: DbConfig


@pytest.fixture
def plugin(monkeypatch: pytest.MonkeyPatch) -> ConfigPlugin:
    """Create an initialized plugin over app.yaml."""
    for name in ("HTTP_HOST", "DB_HOST", "DB_PASSWORD", "LOG_CHANNEL", "MIXED_VALUE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("PCTEST_HTTP_POOL_NUM_WORKERS", raising=False)
    monkeypatch.setenv("HTTP_HOST", "0.0.0.0")
    monkeypatch.setenv("DB_HOST", "localhost")

    configured = ConfigPlugin(
        PluginSettings(path=str(FIXTURES_DIR / "app.yaml"), prefix="pctest")
    )
    configured.init()
    return configured


class TestUnmarshalKey:
    """Tests for unmarshal_key."""

    @pytest.mark.integration
    def test_decodes_nested_section(self, plugin: ConfigPlugin) -> None:
        """Test decoding a section with a nested model."""
        http = plugin.unmarshal_key("http", HttpConfig)

        assert http.address == "0.0.0.0:8080"
        assert http.middleware == ["headers", "gzip"]
        assert http.pool.num_workers == 4
        assert http.pool.allocate_timeout == timedelta(seconds=60)

    @pytest.mark.integration
    def test_decodes_env_string_into_int(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that string overrides coerce into typed fields."""
        monkeypatch.setenv("PCTEST_HTTP_POOL_NUM_WORKERS", "16")
        configured = ConfigPlugin(
            PluginSettings(path=str(FIXTURES_DIR / "app.yaml"), prefix="pctest")
        )
        configured.init()

        pool = configured.unmarshal_key("http.pool", PoolConfig)
        assert pool.num_workers == 16

    @pytest.mark.integration
    def test_absent_section_keeps_defaults(self, plugin: ConfigPlugin) -> None:
        """Test that a missing key yields the model defaults without error."""
        pool = plugin.unmarshal_key("nonexistent", PoolConfig)
        assert pool == PoolConfig()

    @pytest.mark.integration
    def test_absent_section_returns_instance_unchanged(self, plugin: ConfigPlugin) -> None:
        """Test that an instance target comes back as given."""
        target = PoolConfig(num_workers=8)
        assert plugin.unmarshal_key("nonexistent", target) is target

    @pytest.mark.integration
    def test_instance_fields_act_as_defaults(self, plugin: ConfigPlugin) -> None:
        """Test that config values overlay the instance values."""
        target = HttpConfig(address="should-be-replaced", middleware=["cors"])
        decoded = plugin.unmarshal_key("http", target)

        assert decoded.address == "0.0.0.0:8080"
        assert decoded.middleware == ["headers", "gzip"]

    @pytest.mark.integration
    def test_dataclass_target(self, plugin: ConfigPlugin) -> None:
        """Test decoding into a dataclass."""
        logs = plugin.unmarshal_key("logs", LogsConfig)

        assert logs.mode == "production"
        assert logs.level == "debug"
        assert logs.channels == ["", "stderr"]

    @pytest.mark.integration
    def test_type_mismatch_raises_decode_error(self, plugin: ConfigPlugin) -> None:
        """Test that a shape mismatch is wrapped in DecodeError."""
        plugin.overwrite({"http.pool.num_workers": "lots"})

        with pytest.raises(DecodeError) as exc_info:
            plugin.unmarshal_key("http.pool", PoolConfig)

        error = exc_info.value
        assert error.op == "config plugin unmarshal key"
        assert error.key == "http.pool"
        assert error.errors[0]["loc"] == "num_workers"
        assert str(error.__cause__) in str(error)
        assert plugin.metrics.decode_errors_total == 1

    @pytest.mark.integration
    def test_scalar_section_into_model_fails(self, plugin: ConfigPlugin) -> None:
        """Test that a scalar cannot decode into a mapping type."""
        with pytest.raises(DecodeError):
            plugin.unmarshal_key("server.command", PoolConfig)


class TestUnmarshal:
    """Tests for unmarshal."""

    @pytest.mark.integration
    def test_decodes_whole_store(self, plugin: ConfigPlugin) -> None:
        """Test decoding the whole configuration."""
        app = plugin.unmarshal(AppConfig)

        assert app.version == "3"
        assert app.db.host == "localhost"
        assert app.db.port == 5432
        assert app.http.pool.debug is False

    @pytest.mark.integration
    def test_missing_required_field(self, plugin: ConfigPlugin) -> None:
        """Test that a missing required field is a DecodeError."""

        class NeedsRpc(BaseModel):
            rpc: dict[str, str]

        with pytest.raises(DecodeError) as exc_info:
            plugin.unmarshal(NeedsRpc)

        assert exc_info.value.op == "config plugin unmarshal"
        assert exc_info.value.errors[0]["type"] == "missing"

    @pytest.mark.integration
    def test_plugin_satisfies_configurer_protocol(self, plugin: ConfigPlugin) -> None:
        """Test that dependents can type against the protocol."""
        assert isinstance(plugin, Configurer)


class TestMalformedTargets:
    """Tests for targets pydantic cannot build."""

    @pytest.mark.integration
    def test_plain_class_target_raises_decode_error(self, plugin: ConfigPlugin) -> None:
        """Test that a schema failure is wrapped with the operation tag."""

        class Plain:
            host: str

        with pytest.raises(DecodeError) as exc_info:
            plugin.unmarshal_key("db", Plain)

        error = exc_info.value
        assert error.op == "config plugin unmarshal key"
        assert error.key == "db"
        assert error.errors == []
        assert isinstance(error.__cause__, PydanticUserError)
        assert plugin.metrics.decode_errors_total == 1

    @pytest.mark.integration
    def test_plain_class_target_for_whole_store(self, plugin: ConfigPlugin) -> None:
        """Test the same wrapping for unmarshal."""

        class Plain:
            pass

        with pytest.raises(DecodeError) as exc_info:
            plugin.unmarshal(Plain)

        assert exc_info.value.op == "config plugin unmarshal"
