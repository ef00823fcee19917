"""Server-side transformation dispatch with bounded, randomized retries."""

from __future__ import annotations

import asyncio
import json
import logging
import random
import time
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from .dispatch_outcomes import (
    SUCCESS_ITEM_STATUS,
    DispatchOutcome,
    DispatchState,
    PayloadSerializationError,
    TransformDispatchError,
    TransformRetryExhaustedError,
    TransientDeliveryFailure,
    TransportResponse,
)
from .error_reporting import ErrorSink, LoggingErrorSink
from .retry_policy import RetryPolicy
from .transform_transport import (
    HttpxTransformTransport,
    TransformTransport,
    build_headers,
    serialize_payload,
)

TransformCallback = Callable[[list[Mapping[str, Any]] | None], object]
Sleep = Callable[[float], Awaitable[object]]

_LOGGER = logging.getLogger("tracking_pipeline.transform_dispatch")


def create_payload(
    event: Mapping[str, Any], *, clock: Callable[[], float] = time.time
) -> dict[str, Any]:
    """Wrap ``event`` into a one-element transformation batch.

    ``orderNo`` is the wall-clock time in milliseconds; it is advisory and may collide.
    """
    return {"batch": [{"orderNo": int(clock() * 1000), "event": event}]}


class TransformDispatcher:
    """Drive one event through Building, Sending, Retrying and a terminal state."""

    def __init__(
        self,
        transport: TransformTransport,
        retry_policy: RetryPolicy | None = None,
        *,
        error_sink: ErrorSink | None = None,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._transport = transport
        self._retry_policy = retry_policy or RetryPolicy()
        self._error_sink = error_sink or LoggingErrorSink()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._clock = clock

    async def dispatch(
        self, event: Mapping[str, Any], write_key: str, endpoint: str
    ) -> DispatchOutcome:
        """Send ``event`` for transformation and return the terminal outcome.

        Delivery failures never raise; they end in the FAILED state after the
        retry budget is spent. The same serialized batch is resent on every retry.
        """
        try:
            content = serialize_payload(create_payload(event, clock=self._clock))
        except (TypeError, ValueError) as exc:
            return self._fail(
                PayloadSerializationError("Event could not be serialized; nothing was sent"),
                attempts=0,
                failure=f"Failed to serialize event: {exc}",
            )
        headers = build_headers(write_key)

        retries_left = self._retry_policy.max_retries
        attempts = 0
        last_failure: str | None = None
        state = DispatchState.SENDING
        while state is DispatchState.SENDING:
            attempts += 1
            try:
                transformed_batch = await self._send_once(endpoint, content, headers)
            except TransientDeliveryFailure as exc:
                last_failure = str(exc)
            else:
                return DispatchOutcome(
                    state=DispatchState.SUCCEEDED,
                    transformed_batch=transformed_batch,
                    attempts=attempts,
                )

            if retries_left <= 0:
                state = DispatchState.FAILED
                break
            state = DispatchState.RETRYING
            retries_left -= 1
            delay = self._retry_policy.next_delay(self._rng)
            _LOGGER.info(
                "Transformation attempt %d failed (%s); retrying in %.0fs",
                attempts,
                last_failure,
                delay,
            )
            await self._sleep(delay)
            state = DispatchState.SENDING

        return self._fail(
            TransformRetryExhaustedError(last_failure), attempts=attempts, failure=last_failure
        )

    async def process_transformation(
        self,
        event: Mapping[str, Any],
        write_key: str,
        endpoint: str,
        on_complete: TransformCallback,
    ) -> None:
        """Dispatch ``event`` and report the transformed batch, or None, to ``on_complete``."""
        outcome = await self.dispatch(event, write_key, endpoint)
        on_complete(outcome.transformed_batch if outcome.succeeded else None)

    async def _send_once(
        self, endpoint: str, content: bytes, headers: Mapping[str, str]
    ) -> list[Mapping[str, Any]]:
        try:
            response = await self._transport.post(endpoint, content, headers)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            _LOGGER.debug("Transport error while sending to %s", endpoint, exc_info=True)
            raise TransientDeliveryFailure(f"Transport error: {exc}") from exc
        return _evaluate_response(response)

    def _fail(
        self, error: TransformDispatchError, *, attempts: int, failure: str | None
    ) -> DispatchOutcome:
        _LOGGER.error("%s (%s)", error, failure)
        self._error_sink.notify(error)
        return DispatchOutcome(
            state=DispatchState.FAILED,
            transformed_batch=None,
            attempts=attempts,
            failure_reason=failure,
        )


async def process_transformation(
    event: Mapping[str, Any],
    write_key: str,
    endpoint: str,
    on_complete: TransformCallback,
    *,
    transport: TransformTransport | None = None,
    retry_policy: RetryPolicy | None = None,
    error_sink: ErrorSink | None = None,
) -> None:
    """Transform ``event`` with the default retry budget and report via ``on_complete``."""
    dispatcher = TransformDispatcher(
        transport or HttpxTransformTransport(),
        retry_policy,
        error_sink=error_sink,
    )
    await dispatcher.process_transformation(event, write_key, endpoint, on_complete)


def _evaluate_response(response: TransportResponse) -> list[Mapping[str, Any]]:
    if response.status_code != 200:
        raise TransientDeliveryFailure(f"Unexpected status code {response.status_code}")
    try:
        body = json.loads(response.body)
    except json.JSONDecodeError as exc:
        raise TransientDeliveryFailure(f"Invalid response body: {exc}") from exc
    transformed_batch = body.get("transformedBatch") if isinstance(body, Mapping) else None
    if not isinstance(transformed_batch, list):
        raise TransientDeliveryFailure("Response body has no transformedBatch list")
    failed_ids = [
        item.get("id") if isinstance(item, Mapping) else None
        for item in transformed_batch
        if not isinstance(item, Mapping) or item.get("status") != SUCCESS_ITEM_STATUS
    ]
    if failed_ids:
        raise TransientDeliveryFailure(f"Transformation failed for destinations {failed_ids}")
    return transformed_batch
