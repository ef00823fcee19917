"""Structural flattening and null-rejection helpers."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any


def flatten(value: Any) -> dict[str, Any]:
    """Linearize nested mappings and lists into dot/index-joined keys.

    ``{"a": {"b": [{"c": 1}]}}`` becomes ``{"a.b.0.c": 1}``. Empty lists and empty
    mappings are kept as ``[]`` and ``{}`` leaves; a scalar root is stored under ``""``.
    """
    flattened: dict[str, Any] = {}
    _flatten_node(value, "", flattened)
    return flattened


def _flatten_node(node: Any, prefix: str, flattened: dict[str, Any]) -> None:
    if isinstance(node, Mapping):
        if not node:
            flattened[prefix] = {}
            return
        for key, child in node.items():
            _flatten_node(child, f"{prefix}.{key}" if prefix else str(key), flattened)
        return
    if _is_list(node):
        if not node:
            flattened[prefix] = []
            return
        for index, child in enumerate(node):
            _flatten_node(child, f"{prefix}.{index}" if prefix else str(index), flattened)
        return
    flattened[prefix] = node


def reject_none(value: Mapping[str, Any] | Sequence[Any]) -> dict[str, Any] | list[Any]:
    """Return a copy of a mapping or list without its None entries (one level)."""
    if isinstance(value, Mapping):
        return {key: item for key, item in value.items() if item is not None}
    return [item for item in value if item is not None]


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))
