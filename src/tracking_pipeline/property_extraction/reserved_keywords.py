"""Reserved keyword detection for tracking-call property bags."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from .path_access import get_path

DEFAULT_RESERVED_KEYWORDS: tuple[str, ...] = (
    "anonymous_id",
    "id",
    "sent_at",
    "received_at",
    "timestamp",
    "original_timestamp",
    "event_text",
    "event",
)

_CHECKED_PATHS = ("properties", "traits", "context.traits")

_LOGGER = logging.getLogger("tracking_pipeline.property_extraction.reserved_keywords")


def check_reserved_keywords(
    message: Mapping[str, Any],
    message_type: str,
    reserved_keys: Sequence[str] = DEFAULT_RESERVED_KEYWORDS,
) -> list[str]:
    """Log a warning for each reserved key used in properties or traits.

    The call is never blocked; the offending keys are returned in encounter order.
    """
    reserved = {key.lower() for key in reserved_keys}
    found: list[str] = []
    for path in _CHECKED_PATHS:
        bag = get_path(message, path)
        if not isinstance(bag, Mapping):
            continue
        for key in bag:
            if str(key).lower() in reserved:
                _LOGGER.warning("Reserved keyword '%s' is used in '%s' call", key, message_type)
                found.append(str(key))
    return found
