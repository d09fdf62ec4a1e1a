"""Coercion of raw configuration values into concrete types.

Configuration values arrive as whatever the file parser produced, and
environment overrides always arrive as strings. The helpers here turn
either into the requested type, or return the type's zero value.
"""

import re
from collections.abc import Mapping
from datetime import timedelta
from typing import Annotated, Any

from pydantic import BeforeValidator


_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")

_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_TRUE_STRINGS = frozenset({"1", "t", "true", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"0", "f", "false", "no", "n", "off", ""})


def parse_duration(value: str) -> timedelta:
    """Parse a duration string such as ``"1m30s"`` or ``"250ms"``.

    A bare number is read as seconds.

    Args:
        value: Duration text, optionally signed.

    Returns:
        The parsed duration.

    Raises:
        ValueError: If the text is not a valid duration.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")

    sign = 1
    if text[0] in "+-":
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    try:
        return timedelta(seconds=sign * float(text))
    except (ValueError, OverflowError):
        pass

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position != len(text) or position == 0:
        raise ValueError(f"invalid duration: {value!r}")
    return timedelta(seconds=sign * total)


def _coerce_duration(value: Any) -> Any:
    if isinstance(value, str):
        return parse_duration(value)
    return value


# Field type for duration settings written as "30s", "1m30s" or seconds
Duration = Annotated[timedelta, BeforeValidator(_coerce_duration)]


def to_string(value: Any) -> str:
    """Convert a value to str, ``""`` for None, lists or mappings."""
    if value is None or isinstance(value, (list, tuple, Mapping)):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_int(value: Any) -> int:
    """Convert a value to int, 0 when not convertible."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return 0
    if isinstance(value, str):
        try:
            return int(value.strip(), 0)
        except ValueError:
            return 0
    return 0


def to_float(value: Any) -> float:
    """Convert a value to float, 0.0 when not convertible."""
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return 0.0
    return 0.0


def to_bool(value: Any) -> bool:
    """Convert a value to bool, False when not convertible."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return False


def to_duration(value: Any) -> timedelta:
    """Convert a value to timedelta, zero when not convertible.

    Numbers are read as seconds, strings as durations (``"1m30s"``).
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        return timedelta(0)
    try:
        if isinstance(value, (int, float)):
            return timedelta(seconds=value)
        if isinstance(value, str):
            return parse_duration(value)
    except (ValueError, OverflowError):
        return timedelta(0)
    return timedelta(0)


def to_string_list(value: Any) -> list[str]:
    """Convert a value to a list of strings.

    Strings are split on whitespace, sequences are converted item by item.
    """
    if isinstance(value, str):
        return value.split()
    if isinstance(value, (list, tuple)):
        return [to_string(item) for item in value]
    return []


def to_string_map(value: Any) -> dict[str, Any]:
    """Convert a mapping to a dict with str keys, ``{}`` otherwise."""
    if isinstance(value, Mapping):
        return {str(key): item for key, item in value.items()}
    return {}
