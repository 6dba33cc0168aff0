"""Escaping of user-supplied values interpolated into generated queries."""

from __future__ import annotations

from typing import Any


def escape_value(value: Any) -> str:
    """Escape a scalar for use inside a single-quoted query literal.

    Backslashes are doubled first, then single quotes are doubled.

    Args:
        value: Any scalar (None gives an empty string)

    Returns:
        Escaped text, without surrounding quotes

    Example:
        >>> escape_value("O'Brien\\\\")
        "O''Brien\\\\\\\\"
    """
    if value is None:
        return ""
    text = str(value)
    text = text.replace("\\", "\\\\")
    text = text.replace("'", "''")
    return text
