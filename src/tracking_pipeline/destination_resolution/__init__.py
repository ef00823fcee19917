"""Destination resolution exports."""

from .destination_refs import (
    DescribedDestination,
    DestinationEntryError,
    DestinationRef,
    NamedDestination,
    to_destination_refs,
)
from .enabled_destinations import (
    is_loosely_false,
    is_loosely_true,
    resolve_enabled,
    resolve_enabled_refs,
)

__all__ = [
    "DescribedDestination",
    "DestinationEntryError",
    "DestinationRef",
    "NamedDestination",
    "is_loosely_false",
    "is_loosely_true",
    "resolve_enabled",
    "resolve_enabled_refs",
    "to_destination_refs",
]
