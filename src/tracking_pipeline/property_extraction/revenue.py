"""Revenue and currency value normalization."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

_ORDER_COMPLETED_PATTERN = re.compile(
    r"^[ _]?completed[ _]?order[ _]?|^[ _]?order[ _]?completed[ _]?$", re.IGNORECASE
)
_LEADING_NUMBER_PATTERN = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def get_currency(value: Any) -> float | int | None:
    """Return a numeric amount from a number or a ``$``-prefixed string, else None."""
    if isinstance(value, bool) or not value:
        return None
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return None
    match = _LEADING_NUMBER_PATTERN.match(value.replace("$", ""))
    if match is None:
        return None
    return float(match.group(0))


def get_revenue(properties: Mapping[str, Any], event_name: str | None) -> float | int | None:
    """Return the revenue amount, falling back to ``total`` for order-completed events."""
    revenue = properties.get("revenue")
    if not revenue and event_name and _ORDER_COMPLETED_PATTERN.search(event_name):
        revenue = properties.get("total")
    return get_currency(revenue)
