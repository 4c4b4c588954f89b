from __future__ import annotations

import pytest

from ingestion.connectors.base import (
    BaseFeedConnector,
    PermanentFetchError,
    TransientFetchError,
    classify_status,
)
from ingestion.models.domain import FeedCategory, FeedSource


SOURCE = FeedSource(url="https://example.com/rss", category=FeedCategory.GENERAL, source_name="Example")


class _ScriptedConnector(BaseFeedConnector):
    def __init__(self, outcomes):
        self._outcomes = list(outcomes)
        self.calls = 0

    def _fetch_raw(self, source: FeedSource) -> str:
        self.calls += 1
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_transient_errors_are_retried_up_to_limit():
    connector = _ScriptedConnector([TransientFetchError("Example", "timeout"), "<rss/>"])

    assert connector.fetch(SOURCE, max_attempts=2) == "<rss/>"
    assert connector.calls == 2


def test_single_attempt_by_default():
    connector = _ScriptedConnector([TransientFetchError("Example", "timeout"), "<rss/>"])

    with pytest.raises(TransientFetchError):
        connector.fetch(SOURCE)
    assert connector.calls == 1


def test_permanent_errors_are_not_retried():
    connector = _ScriptedConnector([PermanentFetchError("Example", "HTTP 404", status_code=404), "<rss/>"])

    with pytest.raises(PermanentFetchError) as exc:
        connector.fetch(SOURCE, max_attempts=3)
    assert connector.calls == 1
    assert exc.value.status_code == 404
    assert exc.value.source == "Example"


@pytest.mark.parametrize(
    "status, expected",
    [(200, None), (204, None), (404, PermanentFetchError), (429, TransientFetchError), (503, TransientFetchError)],
)
def test_classify_status(status, expected):
    error = classify_status("Example", status)
    if expected is None:
        assert error is None
    else:
        assert isinstance(error, expected)
        assert error.status_code == status
