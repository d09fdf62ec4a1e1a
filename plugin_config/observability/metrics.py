"""Metrics collection for the configuration plugin."""

from dataclasses import dataclass


@dataclass
class ConfigMetrics:
    """Counters kept by one plugin instance.

    Attributes:
        init_duration_ms: Time taken by init().
        keys_loaded: Leaf keys known after the file was read.
        keys_expanded: Values whose text changed during placeholder expansion.
        env_overrides: Keys whose value came from an environment variable.
        overwrites_total: Keys written through overwrite().
        decode_errors_total: Failed unmarshal calls.
    """

    init_duration_ms: float = 0.0
    keys_loaded: int = 0
    keys_expanded: int = 0
    env_overrides: int = 0
    overwrites_total: int = 0
    decode_errors_total: int = 0

    def record_init_duration(self, duration_ms: float) -> None:
        """Record init duration.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.init_duration_ms = duration_ms

    def record_keys_loaded(self, count: int) -> None:
        """Record the number of leaf keys loaded."""
        self.keys_loaded = count

    def record_key_expanded(self) -> None:
        """Record a value changed by placeholder expansion."""
        self.keys_expanded += 1

    def record_env_override(self) -> None:
        """Record a key taken from the environment."""
        self.env_overrides += 1

    def record_overwrite(self, count: int = 1) -> None:
        """Record keys written through overwrite()."""
        self.overwrites_total += count

    def record_decode_error(self) -> None:
        """Record a failed unmarshal call."""
        self.decode_errors_total += 1

    def to_dict(self) -> dict[str, float | int]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        return {
            "init_duration_ms": self.init_duration_ms,
            "keys_loaded": self.keys_loaded,
            "keys_expanded": self.keys_expanded,
            "env_overrides": self.env_overrides,
            "overwrites_total": self.overwrites_total,
            "decode_errors_total": self.decode_errors_total,
        }
