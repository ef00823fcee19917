"""Transformation dispatch domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

RETRY_FAILED_MESSAGE = "Retry failed. Dropping the event"
SUCCESS_ITEM_STATUS = "200"


class DispatchState(str, Enum):
    """Transformation dispatch state machine states."""

    BUILDING = "building"
    SENDING = "sending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class TransformDispatchError(Exception):
    """Base error for transformation dispatch failures."""


class TransientDeliveryFailure(TransformDispatchError):
    """One send attempt failed and may be retried."""


class PayloadSerializationError(TransformDispatchError):
    """The event could not be encoded; nothing was sent."""


class TransformRetryExhaustedError(TransformDispatchError):
    """Every attempt failed and the event is dropped."""

    def __init__(self, last_failure: str | None = None) -> None:
        super().__init__(RETRY_FAILED_MESSAGE)
        self.last_failure = last_failure


@dataclass(frozen=True)
class TransportResponse:
    """Status code and raw body returned by a transformation endpoint."""

    status_code: int
    body: str


@dataclass(frozen=True)
class TransformResultItem:
    """One destination's result inside a ``transformedBatch`` response."""

    id: str | None
    status: str
    payload: tuple[Mapping[str, Any], ...]

    @property
    def is_ok(self) -> bool:
        return self.status == SUCCESS_ITEM_STATUS

    @staticmethod
    def from_wire(item: Mapping[str, Any]) -> TransformResultItem:
        payload = item.get("payload")
        return TransformResultItem(
            id=item.get("id"),
            status=str(item.get("status")),
            payload=tuple(payload) if isinstance(payload, list) else (),
        )


@dataclass(frozen=True)
class DispatchOutcome:
    """Terminal result of one transformation dispatch."""

    state: DispatchState
    transformed_batch: list[Mapping[str, Any]] | None
    attempts: int
    failure_reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is DispatchState.SUCCEEDED

    @property
    def result_items(self) -> tuple[TransformResultItem, ...]:
        return tuple(TransformResultItem.from_wire(item) for item in self.transformed_batch or ())
