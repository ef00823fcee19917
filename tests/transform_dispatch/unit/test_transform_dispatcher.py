"""Transformation dispatcher state machine tests."""

from __future__ import annotations

import base64
import json
import logging
import math
import random
from collections.abc import Mapping

import pytest
from tracking_pipeline.transform_dispatch.dispatch_outcomes import (
    RETRY_FAILED_MESSAGE,
    DispatchState,
    PayloadSerializationError,
    TransformRetryExhaustedError,
    TransportResponse,
)
from tracking_pipeline.transform_dispatch.retry_policy import RetryPolicy
from tracking_pipeline.transform_dispatch.transform_dispatcher import (
    TransformDispatcher,
    create_payload,
    process_transformation,
)

ENDPOINT = "https://dataplane.example.com/v1/transform"
EVENT = {"type": "track", "event": "Product Viewed", "properties": {"sku": "a", "coupon": None}}


def _ok_body(*statuses: str) -> str:
    return json.dumps(
        {
            "transformedBatch": [
                {"id": f"dest-{index}", "status": status, "payload": [{"orderNo": 1}]}
                for index, status in enumerate(statuses)
            ]
        }
    )


class FakeTransport:
    """Transport returning scripted responses or raising scripted errors."""

    def __init__(self, *responses: TransportResponse | Exception) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, bytes, Mapping[str, str]]] = []

    async def post(
        self, url: str, content: bytes, headers: Mapping[str, str]
    ) -> TransportResponse:
        self.calls.append((url, content, headers))
        response = self._responses[min(len(self.calls), len(self._responses)) - 1]
        if isinstance(response, Exception):
            raise response
        return response


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class RecordingErrorSink:
    def __init__(self) -> None:
        self.errors: list[Exception] = []

    def notify(self, error: Exception) -> None:
        self.errors.append(error)


def _dispatcher(
    transport: FakeTransport,
    sleep: RecordingSleep,
    sink: RecordingErrorSink | None = None,
) -> TransformDispatcher:
    return TransformDispatcher(
        transport,
        RetryPolicy(),
        error_sink=sink,
        sleep=sleep,
        rng=random.Random(7),
        clock=lambda: 1_700_000_000.25,
    )


def test_create_payload_wraps_event_in_single_item_batch() -> None:
    payload = create_payload(EVENT, clock=lambda: 1_700_000_000.5)

    assert payload == {"batch": [{"orderNo": 1_700_000_000_500, "event": EVENT}]}


@pytest.mark.asyncio
async def test_success_on_first_attempt_performs_no_retries() -> None:
    transport = FakeTransport(TransportResponse(200, _ok_body("200", "200")))
    sleep = RecordingSleep()
    results: list[object] = []

    await _dispatcher(transport, sleep).process_transformation(
        EVENT, "write-key", ENDPOINT, results.append
    )

    assert len(transport.calls) == 1
    assert sleep.delays == []
    assert results == [json.loads(_ok_body("200", "200"))["transformedBatch"]]


@pytest.mark.asyncio
async def test_request_carries_basic_auth_and_omits_none_fields() -> None:
    transport = FakeTransport(TransportResponse(200, _ok_body("200")))

    await _dispatcher(transport, RecordingSleep()).dispatch(EVENT, "write-key", ENDPOINT)

    url, content, headers = transport.calls[0]
    assert url == ENDPOINT
    assert headers["Content-Type"] == "application/json"
    assert headers["Authorization"] == "Basic " + base64.b64encode(b"write-key:").decode()
    body = json.loads(content)
    assert body == {
        "batch": [
            {
                "orderNo": 1_700_000_000_250,
                "event": {
                    "type": "track",
                    "event": "Product Viewed",
                    "properties": {"sku": "a"},
                },
            }
        ]
    }


@pytest.mark.asyncio
async def test_always_failing_dispatch_makes_four_attempts_then_reports_none(
    caplog: pytest.LogCaptureFixture,
) -> None:
    transport = FakeTransport(TransportResponse(500, "boom"))
    sleep = RecordingSleep()
    sink = RecordingErrorSink()
    results: list[object] = []

    with caplog.at_level(logging.ERROR):
        await _dispatcher(transport, sleep, sink).process_transformation(
            EVENT, "write-key", ENDPOINT, results.append
        )

    assert len(transport.calls) == 4
    assert len(sleep.delays) == 3
    assert all(delay in (1.0, 2.0, 3.0) for delay in sleep.delays)
    assert results == [None]
    assert RETRY_FAILED_MESSAGE in caplog.text
    assert len(sink.errors) == 1
    assert isinstance(sink.errors[0], TransformRetryExhaustedError)


@pytest.mark.asyncio
async def test_same_batch_is_resent_on_retry() -> None:
    transport = FakeTransport(
        TransportResponse(503, ""),
        TransportResponse(200, _ok_body("200")),
    )

    outcome = await _dispatcher(transport, RecordingSleep()).dispatch(
        EVENT, "write-key", ENDPOINT
    )

    assert outcome.state is DispatchState.SUCCEEDED
    assert outcome.attempts == 2
    assert transport.calls[0][1] == transport.calls[1][1]


@pytest.mark.asyncio
async def test_partial_item_failure_is_retried() -> None:
    transport = FakeTransport(
        TransportResponse(200, _ok_body("200", "400")),
        TransportResponse(200, _ok_body("200", "200")),
    )

    outcome = await _dispatcher(transport, RecordingSleep()).dispatch(
        EVENT, "write-key", ENDPOINT
    )

    assert outcome.succeeded
    assert outcome.attempts == 2
    assert [item.id for item in outcome.result_items] == ["dest-0", "dest-1"]
    assert all(item.is_ok for item in outcome.result_items)


@pytest.mark.asyncio
async def test_transport_exceptions_and_malformed_bodies_are_transient() -> None:
    transport = FakeTransport(
        ConnectionError("reset"),
        TransportResponse(200, "not json"),
        TransportResponse(200, json.dumps({"unexpected": True})),
        TransportResponse(200, _ok_body("200")),
    )

    outcome = await _dispatcher(transport, RecordingSleep()).dispatch(
        EVENT, "write-key", ENDPOINT
    )

    assert outcome.succeeded
    assert outcome.attempts == 4


@pytest.mark.asyncio
async def test_exhausted_outcome_carries_last_failure_reason() -> None:
    transport = FakeTransport(TransportResponse(200, _ok_body("500")))

    outcome = await _dispatcher(transport, RecordingSleep()).dispatch(
        EVENT, "write-key", ENDPOINT
    )

    assert outcome.state is DispatchState.FAILED
    assert outcome.transformed_batch is None
    assert outcome.attempts == 4
    assert outcome.failure_reason is not None
    assert "dest-0" in outcome.failure_reason


@pytest.mark.asyncio
async def test_empty_transformed_batch_counts_as_success() -> None:
    transport = FakeTransport(TransportResponse(200, json.dumps({"transformedBatch": []})))

    outcome = await _dispatcher(transport, RecordingSleep()).dispatch(
        EVENT, "write-key", ENDPOINT
    )

    assert outcome.succeeded
    assert outcome.transformed_batch == []


@pytest.mark.asyncio
async def test_zero_retry_budget_makes_single_attempt() -> None:
    transport = FakeTransport(TransportResponse(500, ""))
    sleep = RecordingSleep()
    dispatcher = TransformDispatcher(transport, RetryPolicy(max_retries=0), sleep=sleep)

    outcome = await dispatcher.dispatch(EVENT, "write-key", ENDPOINT)

    assert outcome.attempts == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_unserializable_event_fails_without_sending() -> None:
    transport = FakeTransport(TransportResponse(200, _ok_body("200")))
    results: list[object] = []

    await _dispatcher(transport, RecordingSleep()).process_transformation(
        {"properties": {"when": object()}}, "write-key", ENDPOINT, results.append
    )

    assert transport.calls == []
    assert results == [None]


@pytest.mark.asyncio
async def test_module_level_process_transformation_uses_injected_transport() -> None:
    transport = FakeTransport(TransportResponse(200, _ok_body("200")))
    results: list[object] = []

    await process_transformation(
        EVENT, "write-key", ENDPOINT, results.append, transport=transport
    )

    assert len(transport.calls) == 1
    assert results[0] == json.loads(_ok_body("200"))["transformedBatch"]


def test_retry_policy_rejects_invalid_settings() -> None:
    with pytest.raises(ValueError):
        RetryPolicy(max_retries=-1)
    with pytest.raises(ValueError):
        RetryPolicy(backoff_seconds=())
    assert RetryPolicy().max_attempts == 4


@pytest.mark.asyncio
async def test_serialization_failure_is_reported_without_retry_exhaustion(
    caplog: pytest.LogCaptureFixture,
) -> None:
    transport = FakeTransport(TransportResponse(200, _ok_body("200")))
    sink = RecordingErrorSink()

    with caplog.at_level(logging.ERROR):
        outcome = await _dispatcher(transport, RecordingSleep(), sink).dispatch(
            {"properties": {"when": object()}}, "write-key", ENDPOINT
        )

    assert outcome.state is DispatchState.FAILED
    assert outcome.attempts == 0
    assert outcome.failure_reason is not None
    assert outcome.failure_reason.startswith("Failed to serialize event")
    assert len(sink.errors) == 1
    assert isinstance(sink.errors[0], PayloadSerializationError)
    assert RETRY_FAILED_MESSAGE not in caplog.text


@pytest.mark.asyncio
async def test_non_finite_property_is_sent_as_null() -> None:
    transport = FakeTransport(TransportResponse(200, _ok_body("200")))

    outcome = await _dispatcher(transport, RecordingSleep()).dispatch(
        {"properties": {"v": math.nan}}, "write-key", ENDPOINT
    )

    assert outcome.succeeded
    assert len(transport.calls) == 1
    body = json.loads(transport.calls[0][1])
    assert body["batch"][0]["event"] == {"properties": {"v": None}}
