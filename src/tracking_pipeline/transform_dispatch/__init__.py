"""Transformation dispatch exports."""

from .dispatch_outcomes import (
    RETRY_FAILED_MESSAGE,
    DispatchOutcome,
    DispatchState,
    PayloadSerializationError,
    TransformDispatchError,
    TransformResultItem,
    TransformRetryExhaustedError,
    TransientDeliveryFailure,
    TransportResponse,
)
from .error_reporting import ErrorSink, LoggingErrorSink
from .retry_policy import RetryPolicy
from .transform_dispatcher import TransformDispatcher, create_payload, process_transformation
from .transform_transport import (
    HttpxTransformTransport,
    TransformTransport,
    build_headers,
    serialize_payload,
    strip_none,
)

__all__ = [
    "RETRY_FAILED_MESSAGE",
    "DispatchOutcome",
    "DispatchState",
    "ErrorSink",
    "HttpxTransformTransport",
    "LoggingErrorSink",
    "PayloadSerializationError",
    "RetryPolicy",
    "TransformDispatchError",
    "TransformDispatcher",
    "TransformResultItem",
    "TransformRetryExhaustedError",
    "TransformTransport",
    "TransientDeliveryFailure",
    "TransportResponse",
    "build_headers",
    "create_payload",
    "process_transformation",
    "serialize_payload",
    "strip_none",
]
