"""Dotted-path access over nested message structures."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def get_path(source: Any, path: str) -> Any:
    """Return the value at ``path`` (``context.traits.email``, ``products.0.sku``) or None."""
    if source is None or not path:
        return None
    value: Any = source
    for part in path.split("."):
        if isinstance(value, Mapping):
            if part not in value:
                return None
            value = value[part]
        elif isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
            if not part.isdecimal() or int(part) >= len(value):
                return None
            value = value[int(part)]
        else:
            return None
    return value


def is_empty(value: Any) -> bool:
    """Return True for values that never win a precedence chain.

    Zero and False are values; only missing, None and empty strings are skipped.
    """
    return value is None or (isinstance(value, str) and value == "")


def first_present(source: Any, paths: Sequence[str]) -> Any:
    """Return the first non-empty value found along ``paths``, else None."""
    for path in paths:
        value = get_path(source, path)
        if not is_empty(value):
            return value
    return None
