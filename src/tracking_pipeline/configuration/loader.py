"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from tracking_pipeline.destination_resolution.destination_refs import (
    DestinationEntryError,
    to_destination_refs,
)
from tracking_pipeline.payload_mapping.mapping_rules import (
    MappingRuleError,
    parse_event_name_rules,
    parse_field_mapping_rules,
)
from tracking_pipeline.payload_mapping.property_mapper import DEFAULT_RESERVED_EVENT_NAMES
from tracking_pipeline.property_extraction.reserved_keywords import DEFAULT_RESERVED_KEYWORDS

from .runtime_settings import (
    Configuration,
    DestinationSettings,
    MappingSettings,
    NameTables,
    ReservedNames,
    TransformationSettings,
)


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    return parse_configuration(parsed, path=path)


def parse_configuration(parsed: Mapping[str, Any], *, path: Path | None = None) -> Configuration:
    """Validate an already-parsed configuration document."""
    return Configuration(
        path=path,
        transformation=_parse_transformation_section(parsed.get("transformation")),
        destinations=_parse_destinations_section(parsed.get("destinations")),
        mappings=_parse_mappings_section(parsed.get("mappings")),
        names=_parse_names_section(parsed.get("names")),
        reserved=_parse_reserved_section(parsed.get("reserved")),
    )


def _parse_transformation_section(value: Any) -> TransformationSettings:
    section = _require_mapping(value, "transformation")
    data_plane_url = _require_non_empty_string(
        section.get("data_plane_url"), "transformation.data_plane_url"
    )
    if not data_plane_url.startswith(("http://", "https://")):
        raise ConfigurationError("transformation.data_plane_url must be an http(s) URL.")
    write_key = _optional_string(section.get("write_key"), "transformation.write_key")
    retry_count = _require_non_negative_int(
        section.get("retry_count", 3), "transformation.retry_count"
    )
    backoff_seconds = _normalize_backoff(section.get("backoff_seconds"))
    timeout_seconds = _require_positive_number(
        section.get("timeout_seconds", 10), "transformation.timeout_seconds"
    )
    return TransformationSettings(
        data_plane_url=data_plane_url,
        write_key=write_key,
        retry_count=retry_count,
        backoff_seconds=backoff_seconds,
        timeout_seconds=float(timeout_seconds),
    )


def _parse_destinations_section(value: Any) -> DestinationSettings:
    if value is None:
        return DestinationSettings()
    section = _require_mapping(value, "destinations")
    enabled_raw = section.get("enabled") or []
    if isinstance(enabled_raw, str) or not isinstance(enabled_raw, Sequence):
        raise ConfigurationError("destinations.enabled must be a list.")
    try:
        to_destination_refs(enabled_raw)
    except DestinationEntryError as exc:
        raise ConfigurationError(f"destinations.enabled: {exc}") from exc
    enabled = tuple(dict(entry) if isinstance(entry, Mapping) else entry for entry in enabled_raw)
    transform = _normalize_string_sequence(section.get("transform"), "destinations.transform")
    return DestinationSettings(enabled=enabled, transform=transform)


def _parse_mappings_section(value: Any) -> MappingSettings:
    if value is None:
        return MappingSettings()
    section = _require_mapping(value, "mappings")
    try:
        return MappingSettings(
            event_names=parse_event_name_rules(section.get("event_names"), "mappings.event_names"),
            event_parameters=parse_field_mapping_rules(
                section.get("event_parameters"), "mappings.event_parameters"
            ),
            item_parameters=parse_field_mapping_rules(
                section.get("item_parameters"), "mappings.item_parameters"
            ),
            page_parameters=parse_field_mapping_rules(
                section.get("page_parameters"), "mappings.page_parameters"
            ),
        )
    except MappingRuleError as exc:
        raise ConfigurationError(str(exc)) from exc


def _parse_names_section(value: Any) -> NameTables:
    if value is None:
        return NameTables()
    section = _require_mapping(value, "names")
    return NameTables(
        common=_normalize_name_table(section.get("common"), "names.common"),
        client_to_server=_normalize_name_table(
            section.get("client_to_server"), "names.client_to_server"
        ),
    )


def _parse_reserved_section(value: Any) -> ReservedNames:
    section = _require_mapping(value, "reserved") if value is not None else {}
    event_names = section.get("event_names")
    keywords = section.get("keywords")
    return ReservedNames(
        event_names=(
            DEFAULT_RESERVED_EVENT_NAMES
            if event_names is None
            else _normalize_string_sequence(event_names, "reserved.event_names")
        ),
        keywords=(
            DEFAULT_RESERVED_KEYWORDS
            if keywords is None
            else _normalize_string_sequence(keywords, "reserved.keywords")
        ),
    )


def _normalize_name_table(value: Any, field_name: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{field_name} must be a mapping of names.")
    table: dict[str, str] = {}
    for key, translated in value.items():
        if not isinstance(key, str) or not isinstance(translated, str):
            raise ConfigurationError(f"{field_name} entries must map strings to strings.")
        table[key] = translated
    return table


def _normalize_backoff(value: Any) -> tuple[int, ...]:
    if value is None:
        return (1, 2, 3)
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ConfigurationError("transformation.backoff_seconds must be a list of integers.")
    delays = tuple(
        _require_positive_int(item, "transformation.backoff_seconds entries") for item in value
    )
    if not delays:
        raise ConfigurationError("transformation.backoff_seconds must not be empty.")
    return delays


def _normalize_string_sequence(value: Any, field_name: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        stripped = value.strip()
        return (stripped,) if stripped else ()
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_positive_int(value: Any, field_name: str) -> int:
    number = _require_non_negative_int(value, field_name)
    if number == 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return number


def _require_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value < 0:
        raise ConfigurationError(f"{field_name} must not be negative.")
    return value


def _require_positive_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{field_name} must be a number.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return float(value)
