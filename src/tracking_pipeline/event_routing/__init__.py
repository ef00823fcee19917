"""Event routing exports."""

from .routing_contracts import NormalizedEvent, RoutingOutcome, TrackingCall
from .tracking_call_use_case import (
    RoutingError,
    build_transform_dispatcher,
    normalize_tracking_call,
    route_tracking_call,
)

__all__ = [
    "TrackingCall",
    "NormalizedEvent",
    "RoutingOutcome",
    "RoutingError",
    "build_transform_dispatcher",
    "normalize_tracking_call",
    "route_tracking_call",
]
