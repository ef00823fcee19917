"""Error sink capability for terminal dispatch failures."""

from __future__ import annotations

import logging
from typing import Protocol

_LOGGER = logging.getLogger("tracking_pipeline.transform_dispatch.errors")


class ErrorSink(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol for crash/error reporting clients."""

    def notify(self, error: Exception) -> None: ...


class LoggingErrorSink:  # pylint: disable=too-few-public-methods
    """Error sink that only records the error in the log."""

    def notify(self, error: Exception) -> None:
        _LOGGER.debug("Reported dispatch error: %s", error)
