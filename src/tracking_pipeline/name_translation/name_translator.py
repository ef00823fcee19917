"""Property-key vocabulary translation."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from tracking_pipeline.configuration.runtime_settings import NameTables

ALL_KEY = "All"


def translate_names(bag: Mapping[str, Any], table: Mapping[str, str]) -> dict[str, Any]:
    """Return a copy of ``bag`` with keys rewritten through ``table``.

    Only keys holding a truthy value are considered. Their value is copied to the
    translated key, and the original key is dropped unless it is ``All``, has no
    entry in ``table``, or translates to itself. Keys introduced by a rewrite are
    not revisited during the same pass.
    """
    translated: dict[str, Any] = dict(bag)
    for key in list(bag):
        if not translated.get(key):
            continue
        target = table.get(key)
        if target:
            translated[target] = translated[key]
        if key != ALL_KEY and key in table and target != key:
            del translated[key]
    return translated


def to_sdk_names(bag: Mapping[str, Any], names: NameTables) -> dict[str, Any]:
    """Rewrite user-supplied destination spellings to SDK-canonical names."""
    return translate_names(bag, names.common)


def to_server_names(bag: Mapping[str, Any], names: NameTables) -> dict[str, Any]:
    """Rewrite SDK-canonical destination names to server-canonical names."""
    return translate_names(bag, names.client_to_server)
