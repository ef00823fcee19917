"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from tracking_pipeline.payload_mapping.mapping_rules import EventNameRule, FieldMappingRule

TRANSFORM_PATH = "/v1/transform"


@dataclass(frozen=True)
class TransformationSettings:
    """Transformation endpoint connectivity and retry configuration."""

    data_plane_url: str
    write_key: str | None
    retry_count: int
    backoff_seconds: tuple[int, ...]
    timeout_seconds: float

    @property
    def endpoint(self) -> str:
        """Return the transformation endpoint derived from the data plane URL."""
        return f"{remove_trailing_slashes(self.data_plane_url)}{TRANSFORM_PATH}"


@dataclass(frozen=True)
class DestinationSettings:
    """Destinations configured for the write key."""

    enabled: tuple[str | Mapping[str, object], ...] = ()
    transform: tuple[str, ...] = ()


@dataclass(frozen=True)
class MappingSettings:
    """Declarative field-mapping tables."""

    event_names: tuple[EventNameRule, ...] = ()
    event_parameters: tuple[FieldMappingRule, ...] = ()
    item_parameters: tuple[FieldMappingRule, ...] = ()
    page_parameters: tuple[FieldMappingRule, ...] = ()


@dataclass(frozen=True)
class NameTables:
    """Property-key vocabularies used by name translation."""

    common: Mapping[str, str] = field(default_factory=dict)
    client_to_server: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ReservedNames:
    """Reserved event names and property keys."""

    event_names: tuple[str, ...]
    keywords: tuple[str, ...]


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path | None
    transformation: TransformationSettings
    destinations: DestinationSettings
    mappings: MappingSettings
    names: NameTables
    reserved: ReservedNames


def remove_trailing_slashes(url: str) -> str:
    return url.rstrip("/") if url else url
