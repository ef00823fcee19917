"""Destination reference entities."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any


class DestinationEntryError(ValueError):
    """Raised when server-supplied destination entries cannot be normalized."""


@dataclass(frozen=True)
class NamedDestination:
    """Destination supplied as a bare name."""

    name: str

    @property
    def entry(self) -> str:
        return self.name


@dataclass(frozen=True)
class DescribedDestination:
    """Destination supplied as an object carrying at least a name."""

    name: str
    config: Mapping[str, Any]

    @property
    def entry(self) -> Mapping[str, Any]:
        return self.config


DestinationRef = NamedDestination | DescribedDestination


def to_destination_refs(
    entries: Sequence[str | Mapping[str, Any]] | None,
) -> tuple[DestinationRef, ...]:
    """Normalize enabled-destination entries; all entries must share one shape."""
    if not entries:
        return ()
    if isinstance(entries[0], str):
        return tuple(_named(entry, index) for index, entry in enumerate(entries))
    if isinstance(entries[0], Mapping):
        return tuple(_described(entry, index) for index, entry in enumerate(entries))
    raise DestinationEntryError("Destination entries must be strings or objects with a name.")


def _named(entry: Any, index: int) -> NamedDestination:
    if not isinstance(entry, str):
        raise DestinationEntryError(
            f"Destination entry {index} must be a string like the first entry."
        )
    return NamedDestination(name=entry)


def _described(entry: Any, index: int) -> DescribedDestination:
    if not isinstance(entry, Mapping):
        raise DestinationEntryError(
            f"Destination entry {index} must be an object like the first entry."
        )
    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise DestinationEntryError(f"Destination entry {index} must carry a non-empty name.")
    return DescribedDestination(name=name, config=entry)
