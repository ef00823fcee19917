"""Declarative field-mapping rule entities."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any


class MappingRuleError(ValueError):
    """Raised when a mapping rule definition is malformed."""


@dataclass(frozen=True)
class FieldMappingRule:
    """Copy one source property onto one or more destination paths.

    A destination path with a dot (``items.item_id``) targets a field of the
    single object held in the list stored under the first segment.
    """

    source_key: str
    destination_paths: tuple[str, ...]


@dataclass(frozen=True)
class EventNameRule:
    """Destination event name selected by a set of source event-name aliases."""

    source_names: tuple[str, ...]
    destination_name: str
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PayloadFieldRule:
    """Read a destination key from one dotted path or a precedence list of paths."""

    destination_key: str
    source_paths: tuple[str, ...]
    precedence: bool = False


def parse_field_mapping_rules(entries: Any, label: str) -> tuple[FieldMappingRule, ...]:
    """Parse ``{src, dest}`` rule entries into field-mapping rules."""
    if entries is None:
        return ()
    if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
        raise MappingRuleError(f"{label} must be a list of rules.")
    rules: list[FieldMappingRule] = []
    for index, entry in enumerate(entries):
        entry_label = f"{label}[{index}]"
        if not isinstance(entry, Mapping):
            raise MappingRuleError(f"{entry_label} must be a mapping with src and dest.")
        source_key = entry.get("src")
        if not isinstance(source_key, str) or not source_key:
            raise MappingRuleError(f"{entry_label}.src must be a non-empty string.")
        rules.append(
            FieldMappingRule(
                source_key=source_key,
                destination_paths=_string_tuple(entry.get("dest"), f"{entry_label}.dest"),
            )
        )
    return tuple(rules)


def parse_event_name_rules(entries: Any, label: str) -> tuple[EventNameRule, ...]:
    """Parse ``{src: [...], dest: name}`` entries into event-name rules."""
    if entries is None:
        return ()
    if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
        raise MappingRuleError(f"{label} must be a list of rules.")
    rules: list[EventNameRule] = []
    for index, entry in enumerate(entries):
        entry_label = f"{label}[{index}]"
        if not isinstance(entry, Mapping):
            raise MappingRuleError(f"{entry_label} must be a mapping with src and dest.")
        destination = entry.get("dest")
        if not isinstance(destination, str) or not destination.strip():
            raise MappingRuleError(f"{entry_label}.dest must be a non-empty string.")
        options = {key: value for key, value in entry.items() if key not in ("src", "dest")}
        rules.append(
            EventNameRule(
                source_names=tuple(
                    name.lower() for name in _string_tuple(entry.get("src"), f"{entry_label}.src")
                ),
                destination_name=destination.strip(),
                options=options,
            )
        )
    return tuple(rules)


def parse_payload_field_rules(entries: Any, label: str) -> tuple[PayloadFieldRule, ...]:
    """Parse ``{destKey, sourceKeys}`` entries into payload construction rules."""
    if entries is None:
        return ()
    if isinstance(entries, (str, bytes)) or not isinstance(entries, Sequence):
        raise MappingRuleError(f"{label} must be a list of rules.")
    rules: list[PayloadFieldRule] = []
    for index, entry in enumerate(entries):
        entry_label = f"{label}[{index}]"
        if not isinstance(entry, Mapping):
            raise MappingRuleError(f"{entry_label} must be a mapping with destKey and sourceKeys.")
        destination_key = entry.get("destKey")
        if not isinstance(destination_key, str) or not destination_key:
            raise MappingRuleError(f"{entry_label}.destKey must be a non-empty string.")
        raw_sources = entry.get("sourceKeys")
        rules.append(
            PayloadFieldRule(
                destination_key=destination_key,
                source_paths=_string_tuple(raw_sources, f"{entry_label}.sourceKeys"),
                precedence=not isinstance(raw_sources, str),
            )
        )
    return tuple(rules)


def _string_tuple(value: Any, label: str) -> tuple[str, ...]:
    if isinstance(value, str):
        if not value:
            raise MappingRuleError(f"{label} must not be empty.")
        return (value,)
    if isinstance(value, Sequence) and not isinstance(value, bytes):
        items = tuple(value)
        if not items or not all(isinstance(item, str) and item for item in items):
            raise MappingRuleError(f"{label} must be a non-empty list of strings.")
        return items
    raise MappingRuleError(f"{label} must be a string or list of strings.")
