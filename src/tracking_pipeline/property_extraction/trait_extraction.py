"""Trait and custom-field extraction from tracking messages."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .path_access import first_present, get_path, is_empty

_DEFINED_TRAIT_SOURCES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("userId", ("userId", "context.traits.userId", "anonymousId")),
    (
        "email",
        ("context.traits.email", "context.traits.Email", "context.traits.E-mail"),
    ),
    ("phone", ("context.traits.phone", "context.traits.Phone")),
    (
        "firstName",
        (
            "context.traits.firstName",
            "context.traits.firstname",
            "context.traits.first_name",
        ),
    ),
    (
        "lastName",
        (
            "context.traits.lastName",
            "context.traits.lastname",
            "context.traits.last_name",
        ),
    ),
    ("name", ("context.traits.name", "context.traits.Name")),
    ("city", ("context.traits.city", "context.traits.City")),
    ("country", ("context.traits.country", "context.traits.Country")),
)


def extract_defined_traits(message: Mapping[str, Any]) -> dict[str, Any]:
    """Collect well-known traits using each field's precedence chain.

    Fields with no candidate value are omitted. When ``name`` is missing but both
    ``firstName`` and ``lastName`` are present, ``name`` is synthesized from them.
    """
    traits: dict[str, Any] = {}
    for trait_name, paths in _DEFINED_TRAIT_SOURCES:
        value = first_present(message, paths)
        if value is not None:
            traits[trait_name] = value

    first_name = traits.get("firstName")
    last_name = traits.get("lastName")
    if "name" not in traits and not is_empty(first_name) and not is_empty(last_name):
        traits["name"] = f"{first_name} {last_name}"
    return traits


def extract_custom_fields(
    message: Mapping[str, Any],
    keys: Sequence[str],
    exclusions: Sequence[str],
    destination: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Copy non-excluded fields of each nested object at ``keys`` into a new mapping.

    Later paths overwrite earlier ones on key collision.
    """
    excluded = set(exclusions)
    extracted: dict[str, Any] = dict(destination or {})
    for key in keys:
        context = get_path(message, key)
        if not isinstance(context, Mapping):
            continue
        for field_name, value in context.items():
            if field_name in excluded:
                continue
            extracted[field_name] = value
    return extracted


def get_data_from_source(
    source: str | Sequence[str], destination: str, properties: Mapping[str, Any]
) -> dict[str, Any]:
    """Return ``{destination: value}`` for the first non-empty source key, else ``{}``."""
    candidates = (source,) if isinstance(source, str) else tuple(source)
    for candidate in candidates:
        value = properties.get(candidate)
        if not is_empty(value):
            return {destination: value}
    return {}
