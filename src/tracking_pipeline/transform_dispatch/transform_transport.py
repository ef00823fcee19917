"""Transformation endpoint transport."""

from __future__ import annotations

import base64
import json
import math
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from .dispatch_outcomes import TransportResponse

DEFAULT_TIMEOUT_SECONDS = 10.0


class TransformTransport(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol for asynchronous POST transports used by the dispatcher."""

    async def post(
        self, url: str, content: bytes, headers: Mapping[str, str]
    ) -> TransportResponse: ...


class HttpxTransformTransport:  # pylint: disable=too-few-public-methods
    """Transport backed by ``httpx.AsyncClient`` with a per-attempt timeout."""

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._client = client

    async def post(
        self, url: str, content: bytes, headers: Mapping[str, str]
    ) -> TransportResponse:
        if self._client is not None:
            return await self._post_with(self._client, url, content, headers)
        async with httpx.AsyncClient(timeout=self._timeout_seconds) as client:
            return await self._post_with(client, url, content, headers)

    async def _post_with(
        self,
        client: httpx.AsyncClient,
        url: str,
        content: bytes,
        headers: Mapping[str, str],
    ) -> TransportResponse:
        response = await client.post(
            url, content=content, headers=dict(headers), timeout=self._timeout_seconds
        )
        return TransportResponse(status_code=response.status_code, body=response.text)


def build_headers(write_key: str) -> dict[str, str]:
    """Return JSON and basic-auth headers for ``write_key``."""
    token = base64.b64encode(f"{write_key}:".encode("utf-8")).decode("ascii")
    return {
        "Content-Type": "application/json",
        "Authorization": f"Basic {token}",
    }


def serialize_payload(payload: Mapping[str, Any]) -> bytes:
    """JSON-encode ``payload`` without None-valued mapping fields.

    NaN and infinities are written as ``null``.
    """
    return json.dumps(
        strip_none(payload), separators=(",", ":"), allow_nan=False
    ).encode("utf-8")


def strip_none(value: Any) -> Any:
    """Drop None values from mappings at every depth; list elements are kept.

    Non-finite floats become None after the drop, so they survive as ``null``.
    """
    if isinstance(value, Mapping):
        return {key: strip_none(item) for key, item in value.items() if item is not None}
    if isinstance(value, (list, tuple)):
        return [strip_none(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value
