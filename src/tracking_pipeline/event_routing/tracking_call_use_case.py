"""Tracking call normalization and routing use-case service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from tracking_pipeline.configuration.runtime_settings import Configuration, TransformationSettings
from tracking_pipeline.destination_resolution import resolve_enabled_refs, to_destination_refs
from tracking_pipeline.name_translation import to_sdk_names, to_server_names
from tracking_pipeline.payload_mapping import (
    find_destination_event_name,
    is_reserved_name,
    map_item_list,
    map_page_view_properties,
    map_properties,
)
from tracking_pipeline.property_extraction import (
    PageContext,
    check_reserved_keywords,
    default_page_properties,
    extract_defined_traits,
)
from tracking_pipeline.transform_dispatch import (
    ErrorSink,
    HttpxTransformTransport,
    RetryPolicy,
    TransformDispatcher,
    TransformTransport,
)

from .routing_contracts import NormalizedEvent, RoutingOutcome, TrackingCall

_LOGGER = logging.getLogger("tracking_pipeline.event_routing")

PAGE_MESSAGE_TYPE = "page"
PRODUCTS_KEY = "products"
ITEMS_KEY = "items"


class RoutingError(Exception):
    """Raised when a tracking call cannot be routed."""


def normalize_tracking_call(
    call: TrackingCall,
    configuration: Configuration,
    page_context: PageContext | None = None,
) -> NormalizedEvent:
    """Reshape a tracking call into its canonical, destination-mapped form."""
    message = call.message
    mappings = configuration.mappings
    reserved_keywords = check_reserved_keywords(
        message, call.message_type, configuration.reserved.keywords
    )

    event_name = call.event_name
    destination_event_name = None
    if event_name:
        if is_reserved_name(event_name, configuration.reserved.event_names):
            _LOGGER.warning("Event name '%s' is reserved by the destination", event_name)
        rule = find_destination_event_name(event_name, mappings.event_names)
        destination_event_name = rule.destination_name if rule else None

    properties = _mapping_or_empty(message.get("properties"))
    mapped_properties = map_properties(properties, mappings.event_parameters)

    items: tuple[Mapping[str, Any], ...] = ()
    products = properties.get(PRODUCTS_KEY)
    if isinstance(products, list):
        items = tuple(
            map_item_list(
                [product for product in products if isinstance(product, Mapping)],
                mapped_properties.get(ITEMS_KEY),
                mappings.item_parameters,
            )
        )

    page_properties: Mapping[str, Any] = {}
    if call.message_type == PAGE_MESSAGE_TYPE:
        page_defaults = default_page_properties(page_context) if page_context else {}
        page_properties = map_page_view_properties(
            {**page_defaults, **properties}, mappings.page_parameters
        )

    integrations = to_sdk_names(
        _mapping_or_empty(message.get("integrations")) or {"All": True}, configuration.names
    )
    return NormalizedEvent(
        message_type=call.message_type,
        event_name=event_name,
        destination_event_name=destination_event_name,
        integrations=integrations,
        properties=mapped_properties,
        items=items,
        page_properties=page_properties,
        traits=extract_defined_traits(message),
        reserved_keywords=tuple(reserved_keywords),
    )


async def route_tracking_call(
    call: TrackingCall,
    configuration: Configuration,
    dispatcher: TransformDispatcher,
    *,
    write_key: str | None = None,
    page_context: PageContext | None = None,
) -> RoutingOutcome:
    """Normalize a call, resolve its destinations, and transform it when required.

    The wire event is dispatched once for all enabled destinations that need
    server-side transformation; its integrations use server-canonical names.
    """
    normalized = normalize_tracking_call(call, configuration, page_context)
    enabled_refs = resolve_enabled_refs(
        normalized.integrations, to_destination_refs(configuration.destinations.enabled)
    )
    transform_names = set(configuration.destinations.transform)
    transform_destinations = tuple(ref.name for ref in enabled_refs if ref.name in transform_names)

    transform_outcome = None
    if transform_destinations:
        resolved_write_key = write_key or configuration.transformation.write_key
        if not resolved_write_key:
            raise RoutingError("A write key is required to transform events.")
        wire_event = {
            **call.message,
            "integrations": to_server_names(normalized.integrations, configuration.names),
        }
        transform_outcome = await dispatcher.dispatch(
            wire_event, resolved_write_key, configuration.transformation.endpoint
        )

    return RoutingOutcome(
        normalized=normalized,
        enabled_destinations=tuple(ref.entry for ref in enabled_refs),
        transform_destinations=transform_destinations,
        transform_outcome=transform_outcome,
    )


def build_transform_dispatcher(
    settings: TransformationSettings,
    *,
    transport: TransformTransport | None = None,
    error_sink: ErrorSink | None = None,
) -> TransformDispatcher:
    """Create a dispatcher using the configured retry budget, backoff and timeout."""
    return TransformDispatcher(
        transport or HttpxTransformTransport(timeout_seconds=settings.timeout_seconds),
        RetryPolicy(max_retries=settings.retry_count, backoff_seconds=settings.backoff_seconds),
        error_sink=error_sink,
    )


def _mapping_or_empty(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}
