"""Shell-style environment placeholder expansion.

Replaces ``$NAME`` and ``${NAME}`` tokens inside a string with values from
the process environment. Unset variables expand to an empty string, which
differs from ``os.path.expandvars`` (that one leaves unknown tokens as is).
"""

import os
from collections.abc import Mapping


_SPECIAL_CHARS = frozenset("*#$@!?-0123456789")


def _is_name_char(char: str) -> bool:
    return char == "_" or ("0" <= char <= "9") or ("a" <= char <= "z") or ("A" <= char <= "Z")


def _shell_name(text: str) -> tuple[str, int]:
    """Scan the variable name following a ``$``.

    Args:
        text: Text right after the ``$``, non-empty.

    Returns:
        Tuple of (name, characters consumed). An empty name with a non-zero
        width means malformed braces that are dropped; an empty name with
        zero width means ``$`` is not followed by a name.
    """
    if text[0] == "{":
        if len(text) > 2 and text[1] in _SPECIAL_CHARS and text[2] == "}":
            return text[1], 3
        closing = text.find("}", 1)
        if closing == -1:
            return "", 1
        if closing == 1:
            return "", 2
        return text[1:closing], closing + 1

    if text[0] in _SPECIAL_CHARS:
        return text[0], 1

    width = 0
    while width < len(text) and _is_name_char(text[width]):
        width += 1
    return text[:width], width


def expand_env(value: str, environ: Mapping[str, str] | None = None) -> str:
    """Expand ``$NAME`` / ``${NAME}`` placeholders in a string.

    Args:
        value: String possibly containing placeholders.
        environ: Variable lookup, defaults to ``os.environ``.

    Returns:
        The string with every placeholder replaced.
    """
    if "$" not in value:
        return value

    env = os.environ if environ is None else environ
    parts: list[str] = []
    start = 0
    i = 0
    while i < len(value):
        if value[i] == "$" and i + 1 < len(value):
            parts.append(value[start:i])
            name, width = _shell_name(value[i + 1 :])
            if name:
                parts.append(env.get(name, ""))
            elif width == 0:
                parts.append("$")
            i += width
            start = i + 1
        i += 1

    parts.append(value[start:])
    return "".join(parts)
