"""Feed fetch errors and the shared retry loop."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from ingestion.models.domain import FeedSource


class ConnectorError(Exception):
    """Base connector error."""


class FeedFetchFailed(ConnectorError):
    """A feed could not be retrieved (network, timeout or non-2xx)."""

    def __init__(self, source: str, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.status_code = status_code


class TransientFetchError(FeedFetchFailed):
    """Retryable failure (timeout, connection reset, 429, 5xx)."""


class PermanentFetchError(FeedFetchFailed):
    """Non-retryable failure (e.g., 404, 410)."""


class MalformedFeedBody(ConnectorError):
    """Feed body yielded no usable items."""

    def __init__(self, source: str) -> None:
        super().__init__(f"{source}: no parseable items")
        self.source = source


def classify_status(source: str, status_code: int) -> Optional[FeedFetchFailed]:
    """Return the error for a non-2xx status, or None when the response is usable."""
    if 200 <= status_code < 300:
        return None
    if status_code == 429 or status_code >= 500:
        return TransientFetchError(source, f"HTTP {status_code}", status_code=status_code)
    return PermanentFetchError(source, f"HTTP {status_code}", status_code=status_code)


class BaseFeedConnector(ABC):
    """Abstract fetcher with a bounded retry on transient failures."""

    max_attempts: int = 1

    def fetch(self, source: FeedSource, *, max_attempts: Optional[int] = None) -> str:
        limit = max(1, max_attempts or self.max_attempts)
        attempts = 0
        last_error: Optional[Exception] = None
        while attempts < limit:
            attempts += 1
            try:
                return self._fetch_raw(source)
            except TransientFetchError as exc:  # retry
                last_error = exc
                if attempts >= limit:
                    raise
            except PermanentFetchError:
                raise
        assert last_error is not None
        raise last_error

    @abstractmethod
    def _fetch_raw(self, source: FeedSource) -> str:
        """Return the raw feed body text."""
