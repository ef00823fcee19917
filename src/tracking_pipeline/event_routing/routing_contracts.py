"""Event routing entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from tracking_pipeline.transform_dispatch.dispatch_outcomes import DispatchOutcome


@dataclass(frozen=True)
class TrackingCall:
    """One raw tracking call (track, page, identify, ...) as handed to the pipeline."""

    message_type: str
    message: Mapping[str, Any]

    @property
    def event_name(self) -> str | None:
        name = self.message.get("event") or self.message.get("name")
        return name if isinstance(name, str) and name else None

    @staticmethod
    def from_message(message: Mapping[str, Any]) -> TrackingCall:
        message_type = message.get("type")
        return TrackingCall(
            message_type=message_type if isinstance(message_type, str) else "track",
            message=message,
        )


@dataclass(frozen=True)
class NormalizedEvent:  # pylint: disable=too-many-instance-attributes
    """Canonical shape of a tracking call after mapping and name translation."""

    message_type: str
    event_name: str | None
    destination_event_name: str | None
    integrations: Mapping[str, Any]
    properties: Mapping[str, Any]
    items: tuple[Mapping[str, Any], ...]
    page_properties: Mapping[str, Any]
    traits: Mapping[str, Any]
    reserved_keywords: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["items"] = list(self.items)
        payload["reserved_keywords"] = list(self.reserved_keywords)
        return payload


@dataclass(frozen=True)
class RoutingOutcome:
    """Result of routing one tracking call."""

    normalized: NormalizedEvent
    enabled_destinations: tuple[str | Mapping[str, Any], ...]
    transform_destinations: tuple[str, ...]
    transform_outcome: DispatchOutcome | None
