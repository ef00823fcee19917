"""Destination enablement resolution."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .destination_refs import DestinationRef, to_destination_refs

ALL_KEY = "All"

_TRUE_STRINGS = frozenset({"true", "1"})
_FALSE_STRINGS = frozenset({"false", "0", ""})


def resolve_enabled(
    intent: Mapping[str, Any] | None,
    server_enabled: Sequence[str | Mapping[str, Any]] | None,
) -> list[str | Mapping[str, Any]]:
    """Return the server-enabled entries the caller's intent allows, in server order."""
    refs = to_destination_refs(server_enabled)
    return [ref.entry for ref in resolve_enabled_refs(intent, refs)]


def resolve_enabled_refs(
    intent: Mapping[str, Any] | None, refs: Sequence[DestinationRef]
) -> list[DestinationRef]:
    """Filter destination refs through an ``{All: bool, <name>: bool}`` intent map.

    With ``All`` false only explicitly enabled destinations pass; otherwise every
    destination passes unless explicitly disabled. Flags are read loosely, so
    ``"true"``/``1`` count as true and ``"false"``/``0`` count as false.
    """
    if not refs:
        return []
    intent = intent or {}
    all_default = intent.get(ALL_KEY)
    all_enabled = True if all_default is None else not is_loosely_false(all_default)

    enabled: list[DestinationRef] = []
    for ref in refs:
        flag = intent.get(ref.name)
        if all_enabled:
            if not is_loosely_false(flag):
                enabled.append(ref)
        elif is_loosely_true(flag):
            enabled.append(ref)
    return enabled


def is_loosely_true(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def is_loosely_false(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, str):
        return value.strip().lower() in _FALSE_STRINGS
    return False
