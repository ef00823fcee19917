"""Payload mapping exports."""

from .mapping_rules import (
    EventNameRule,
    FieldMappingRule,
    MappingRuleError,
    PayloadFieldRule,
    parse_event_name_rules,
    parse_field_mapping_rules,
    parse_payload_field_rules,
)
from .property_mapper import (
    DEFAULT_RESERVED_EVENT_NAMES,
    construct_payload,
    find_destination_event_name,
    is_reserved_name,
    map_item_list,
    map_page_view_properties,
    map_properties,
)

__all__ = [
    "DEFAULT_RESERVED_EVENT_NAMES",
    "EventNameRule",
    "FieldMappingRule",
    "MappingRuleError",
    "PayloadFieldRule",
    "construct_payload",
    "find_destination_event_name",
    "is_reserved_name",
    "map_item_list",
    "map_page_view_properties",
    "map_properties",
    "parse_event_name_rules",
    "parse_field_mapping_rules",
    "parse_payload_field_rules",
]
