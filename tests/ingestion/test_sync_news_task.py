from __future__ import annotations

import threading
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Union

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from ingestion.connectors.base import BaseFeedConnector, PermanentFetchError, TransientFetchError
from ingestion.db.models import Base, JobRun, JobStage, JobStatus, NewsArticle
from ingestion.db.session import get_engine
from ingestion.models.domain import FeedCategory, FeedSource
from ingestion.settings import get_settings, reset_settings_cache
from ingestion.tasks import sync_news as sync_mod


NOW = datetime(2025, 6, 12, 12, 0, tzinfo=timezone.utc)

FOOTBALL = FeedSource(url="https://feeds.example.com/football.xml", category=FeedCategory.FOOTBALL, source_name="Example Football")
TENNIS = FeedSource(url="https://feeds.example.com/tennis.xml", category=FeedCategory.TENNIS, source_name="Example Tennis")
BROKEN = FeedSource(url="https://feeds.example.com/broken.xml", category=FeedCategory.GENERAL, source_name="Broken")


def _feed_body(prefix: str, count: int) -> str:
    items = "".join(
        f"<item><title>{prefix} story {i}</title>"
        f"<link>https://example.com/{prefix}/story-{i}</link>"
        f"<description><![CDATA[<p>{prefix} body {i}</p>]]></description>"
        f"<pubDate>Thu, 12 Jun 2025 0{i}:00:00 GMT</pubDate></item>"
        for i in range(count)
    )
    return f"<rss><channel>{items}</channel></rss>"


class _FakeFetcher(BaseFeedConnector):
    def __init__(self, responses: Dict[str, Union[str, Exception]]):
        self._responses = responses

    def _fetch_raw(self, source: FeedSource) -> str:
        outcome = self._responses[source.url]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def _env(monkeypatch, tmp_path: Path):
    monkeypatch.setenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("DATABASE_DSN", f"sqlite:///{tmp_path / 'sync.db'}")
    monkeypatch.setenv("FEED_CONCURRENCY", "4")
    reset_settings_cache()
    Base.metadata.create_all(bind=get_engine())
    yield
    reset_settings_cache()


def _session():
    return sessionmaker(bind=get_engine(), expire_on_commit=False, future=True)()


def _article_count() -> int:
    with _session() as session:
        return session.scalar(select(func.count()).select_from(NewsArticle))


def test_sync_writes_capped_articles_per_feed():
    fetcher = _FakeFetcher({FOOTBALL.url: _feed_body("football", 5), TENNIS.url: _feed_body("tennis", 2)})

    stats = sync_mod.sync_news_core([FOOTBALL, TENNIS], fetcher=fetcher, now=NOW)

    assert stats.total_feeds == 2
    assert stats.successful_feeds == 2
    assert stats.failed_feeds == 0
    assert stats.total_articles == 5
    assert _article_count() == 5

    with _session() as session:
        football = session.scalars(select(NewsArticle).where(NewsArticle.category == "Football")).all()
        assert sorted(a.title for a in football) == ["football story 0", "football story 1", "football story 2"]
        assert all(a.content.startswith("football body") for a in football)
        jr = session.scalars(select(JobRun).order_by(JobRun.started_at.desc())).first()
        assert jr is not None and jr.status == JobStatus.SUCCEEDED and jr.stage == JobStage.SYNC_NEWS


def test_resync_of_same_feed_does_not_duplicate():
    fetcher = _FakeFetcher({FOOTBALL.url: _feed_body("football", 3)})

    sync_mod.sync_news_core([FOOTBALL], fetcher=fetcher, now=NOW)
    first_ids = _ids()
    second = sync_mod.sync_news_core([FOOTBALL], fetcher=fetcher, now=NOW)

    assert second.total_articles == 3
    assert _article_count() == 3
    assert _ids() == first_ids


def _ids():
    with _session() as session:
        return set(session.scalars(select(NewsArticle.id)).all())


def test_failing_feed_is_isolated():
    fetcher = _FakeFetcher(
        {
            FOOTBALL.url: _feed_body("football", 3),
            TENNIS.url: _feed_body("tennis", 3),
            BROKEN.url: TransientFetchError("Broken", "HTTP 500", status_code=500),
        }
    )

    stats = sync_mod.sync_news_core([FOOTBALL, BROKEN, TENNIS], fetcher=fetcher, now=NOW)

    assert stats.failed_feeds == 1
    assert stats.successful_feeds == 2
    assert stats.total_articles == 6


def test_empty_or_unparseable_feeds_count_as_failed():
    fetcher = _FakeFetcher(
        {
            FOOTBALL.url: "<html>maintenance</html>",
            TENNIS.url: "<rss><item><link>https://example.com/x</link></item></rss>",
            BROKEN.url: PermanentFetchError("Broken", "HTTP 404", status_code=404),
        }
    )

    stats = sync_mod.sync_news_core([FOOTBALL, TENNIS, BROKEN], fetcher=fetcher, now=NOW)

    assert stats.successful_feeds == 0
    assert stats.failed_feeds == 3
    assert stats.total_articles == 0


def test_unexpected_worker_error_is_counted_not_raised():
    class _Exploding(BaseFeedConnector):
        def _fetch_raw(self, source: FeedSource) -> str:
            if source is BROKEN:
                raise RuntimeError("parser bug")
            return _feed_body("tennis", 1)

    stats = sync_mod.sync_news_core([BROKEN, TENNIS], fetcher=_Exploding(), now=NOW)

    assert stats.failed_feeds == 1
    assert stats.successful_feeds == 1


def test_retention_sweep_runs_before_fetch_even_if_all_feeds_fail():
    with _session() as session:
        session.add_all(
            [
                NewsArticle(
                    id="news-old-1",
                    title="old",
                    excerpt="",
                    content="",
                    image="https://img/x.jpg",
                    category="General",
                    published_at=NOW - timedelta(days=3),
                ),
                NewsArticle(
                    id="news-fresh-1",
                    title="fresh",
                    excerpt="",
                    content="",
                    image="https://img/x.jpg",
                    category="General",
                    published_at=NOW - timedelta(days=1),
                ),
            ]
        )
        session.commit()

    fetcher = _FakeFetcher({BROKEN.url: TransientFetchError("Broken", "timeout")})
    stats = sync_mod.sync_news_core([BROKEN], fetcher=fetcher, now=NOW)

    assert stats.old_articles_deleted == 1
    assert stats.failed_feeds == 1
    assert _ids() == {"news-fresh-1"}


def test_storage_failure_of_one_article_does_not_abort_feed(monkeypatch):
    from ingestion.repositories import articles as repo

    real_upsert = repo.upsert_article

    def flaky_upsert(session, dto):
        if dto.title.endswith("1"):
            from sqlalchemy.exc import OperationalError

            raise OperationalError("INSERT", {}, Exception("disk I/O error"))
        return real_upsert(session, dto)

    monkeypatch.setattr(sync_mod, "upsert_article", flaky_upsert)
    fetcher = _FakeFetcher({FOOTBALL.url: _feed_body("football", 3)})

    stats = sync_mod.sync_news_core([FOOTBALL], fetcher=fetcher, now=NOW)

    assert stats.total_articles == 2
    assert stats.successful_feeds == 1
    assert _article_count() == 2


def test_empty_registry_only_sweeps():
    stats = sync_mod.sync_news_core([], fetcher=_FakeFetcher({}), now=NOW)

    assert stats.total_feeds == 0
    assert stats.as_response() == {
        "totalArticles": 0,
        "totalFeeds": 0,
        "successfulFeeds": 0,
        "failedFeeds": 0,
        "oldArticlesDeleted": 0,
    }


def test_database_failure_marks_run_failed(monkeypatch):
    def boom(*_args, **_kwargs):
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(sync_mod, "delete_expired_articles", boom)

    with pytest.raises(RuntimeError):
        sync_mod.sync_news_core([FOOTBALL], fetcher=_FakeFetcher({}), now=NOW)

    with _session() as session:
        jr = session.scalars(select(JobRun).order_by(JobRun.started_at.desc())).first()
        assert jr is not None and jr.status == JobStatus.FAILED
        assert "database unavailable" in jr.error_message


def test_closing_outcomes_early_does_not_wait_for_running_feeds():
    release = threading.Event()

    class _Stalled(BaseFeedConnector):
        def _fetch_raw(self, source: FeedSource) -> str:
            if source.url != FOOTBALL.url:
                release.wait(10)
            return _feed_body("football", 1)

    outcomes = sync_mod.iter_feed_outcomes(
        [FOOTBALL, TENNIS, BROKEN], _Stalled(), settings=get_settings(), now=NOW
    )
    try:
        first = next(outcomes)
        started = time.monotonic()
        outcomes.close()
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert first.source.url == FOOTBALL.url
    assert elapsed < 2


def test_commit_failure_aborts_without_waiting_for_pending_feeds(monkeypatch):
    release = threading.Event()

    class _Stalled(BaseFeedConnector):
        def _fetch_raw(self, source: FeedSource) -> str:
            if source.url != FOOTBALL.url:
                release.wait(10)
            return _feed_body("football", 1)

    def broken_persist(*_args, **_kwargs):
        raise RuntimeError("commit failed")

    monkeypatch.setattr(sync_mod, "_persist_outcome", broken_persist)

    started = time.monotonic()
    try:
        with pytest.raises(RuntimeError, match="commit failed"):
            sync_mod.sync_news_core([FOOTBALL, TENNIS, BROKEN], fetcher=_Stalled(), now=NOW)
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert elapsed < 2
