"""Declarative property mapping service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from tracking_pipeline.property_extraction.path_access import first_present, get_path

from .mapping_rules import EventNameRule, FieldMappingRule, PayloadFieldRule

DEFAULT_RESERVED_EVENT_NAMES: tuple[str, ...] = (
    "ad_activeview",
    "ad_click",
    "ad_exposure",
    "ad_impression",
    "ad_query",
    "adunit_exposure",
    "app_clear_data",
    "app_install",
    "app_update",
    "app_remove",
    "error",
    "first_open",
    "first_visit",
    "in_app_purchase",
    "notification_dismiss",
    "notification_foreground",
    "notification_open",
    "notification_receive",
    "os_update",
    "screen_view",
    "session_start",
    "user_engagement",
)


def map_properties(
    properties: Mapping[str, Any], rules: Sequence[FieldMappingRule]
) -> dict[str, Any]:
    """Reshape ``properties`` into a destination payload using ``rules``.

    Every rule matching a present key is applied in rule order, so the last
    applied rule wins for a flat destination key. ``a.b`` destinations write into
    one shared object held as the single element of the list under ``a``; only
    the first two path segments are used. Keys without a rule are dropped.
    """
    mapped: dict[str, Any] = {}
    accumulators: dict[str, dict[str, Any]] = {}
    for key, value in properties.items():
        for rule in rules:
            if rule.source_key != key:
                continue
            for destination_path in rule.destination_paths:
                segments = destination_path.split(".")
                if len(segments) == 1:
                    mapped[destination_path] = value
                    continue
                level_one, level_two = segments[0], segments[1]
                accumulator = accumulators.get(level_one)
                if accumulator is None:
                    accumulator = {}
                    accumulators[level_one] = accumulator
                    mapped[level_one] = [accumulator]
                accumulator[level_two] = value
    return mapped


def map_item_list(
    items: Sequence[Mapping[str, Any]],
    shared_extras: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None,
    rules: Sequence[FieldMappingRule],
) -> list[dict[str, Any]]:
    """Map each item with ``rules`` and merge the shared extras onto every result.

    Shared extras win on key collision. A list of extras contributes its first element.
    """
    extras = _resolve_shared_extras(shared_extras)
    return [{**map_properties(item, rules), **extras} for item in items]


def map_page_view_properties(
    properties: Mapping[str, Any], page_rules: Sequence[FieldMappingRule]
) -> dict[str, Any]:
    return map_properties(properties, page_rules)


def find_destination_event_name(
    event_name: str, rules: Sequence[EventNameRule]
) -> EventNameRule | None:
    """Return the first rule whose source aliases contain ``event_name`` (case-insensitive)."""
    lowered = event_name.lower()
    for rule in rules:
        if lowered in rule.source_names:
            return rule
    return None


def is_reserved_name(
    name: str, reserved_event_names: Sequence[str] = DEFAULT_RESERVED_EVENT_NAMES
) -> bool:
    return name in reserved_event_names


def construct_payload(
    source: Mapping[str, Any] | None, rules: Sequence[PayloadFieldRule]
) -> dict[str, Any]:
    """Build a payload by reading each rule's dotted source path(s) from ``source``.

    A precedence rule takes the first non-empty value among its paths.
    """
    payload: dict[str, Any] = {}
    if not source:
        return payload
    for rule in rules:
        if rule.precedence:
            value = first_present(source, rule.source_paths)
        else:
            value = get_path(source, rule.source_paths[0])
        if value is not None:
            payload[rule.destination_key] = value
    return payload


def _resolve_shared_extras(
    shared_extras: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None,
) -> Mapping[str, Any]:
    if shared_extras is None:
        return {}
    if isinstance(shared_extras, Mapping):
        return shared_extras
    if shared_extras and isinstance(shared_extras[0], Mapping):
        return shared_extras[0]
    return {}
