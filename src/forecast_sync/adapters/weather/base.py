from __future__ import annotations

from typing import Protocol

from ...domain.models import ForecastBatch


class FetchError(RuntimeError):
    """Raised when a forecast cannot be retrieved from the provider."""

    kind = "fetch"


class FetchNetworkError(FetchError):
    """Raised when the provider cannot be reached."""

    kind = "network"


class FetchDecodeError(FetchError):
    """Raised when the provider response is not a forecast we can read."""

    kind = "decode"


class FetchUpstreamError(FetchError):
    """Raised when the provider answered with its own error code."""

    kind = "upstream"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class ForecastFetcher(Protocol):
    def fetch(self) -> ForecastBatch:
        """Fetch the configured location's daily forecast, ascending by date."""
