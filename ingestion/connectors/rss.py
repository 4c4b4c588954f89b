"""HTTP fetcher for RSS feeds (client-injectable for tests)."""

from __future__ import annotations

import time
from typing import List, Optional

import httpx

from ingestion.models.domain import FeedSource
from ingestion.settings import Settings, get_settings

from .base import BaseFeedConnector, TransientFetchError, classify_status


ACCEPT_HEADER = "application/rss+xml, application/xml;q=0.9, text/xml;q=0.9, */*;q=0.5"


class RSSFeedFetcher(BaseFeedConnector):
    """Fetches one feed body per call.

    - client 주입 시: 공유 httpx.Client 사용 (동시 수집 시 커넥션 재사용)
    - client 미주입 시: 모듈 레벨 httpx.stream 호출
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.Client] = None):
        cfg = settings or get_settings()
        self._client = client
        self._timeout = float(cfg.feed_timeout_seconds)
        self._headers = {"User-Agent": cfg.feed_user_agent, "Accept": ACCEPT_HEADER}
        self.max_attempts = int(cfg.feed_max_attempts)

    def _open(self, source: FeedSource):
        kwargs = dict(headers=self._headers, timeout=self._timeout, follow_redirects=True)
        if self._client is not None:
            return self._client.stream("GET", source.url, **kwargs)
        return httpx.stream("GET", source.url, **kwargs)

    def _fetch_raw(self, source: FeedSource) -> str:
        # httpx timeouts are per phase; the deadline bounds the whole download
        deadline = time.monotonic() + self._timeout
        try:
            with self._open(source) as resp:
                error = classify_status(source.source_name, resp.status_code)
                if error is not None:
                    raise error
                chunks: List[bytes] = []
                for chunk in resp.iter_bytes():
                    if time.monotonic() > deadline:
                        raise TransientFetchError(source.source_name, "timeout")
                    chunks.append(chunk)
                encoding = resp.encoding or "utf-8"
        except httpx.TimeoutException as exc:
            raise TransientFetchError(source.source_name, "timeout") from exc
        except httpx.HTTPError as exc:
            raise TransientFetchError(source.source_name, f"request error: {exc}") from exc
        return b"".join(chunks).decode(encoding, errors="replace")
