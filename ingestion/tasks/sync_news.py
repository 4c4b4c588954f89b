"""Celery task and core logic for the sports news sync cycle."""

from __future__ import annotations

import uuid
from contextlib import closing
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Iterator, Optional, Sequence

import httpx
from celery import shared_task
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ingestion.connectors.base import BaseFeedConnector, FeedFetchFailed, MalformedFeedBody
from ingestion.connectors.rss import RSSFeedFetcher
from ingestion.db.models import Base, JobStage
from ingestion.db.session import get_engine, session_scope
from ingestion.feeds import DEFAULT_FEEDS
from ingestion.models.domain import FeedOutcome, FeedSource, SyncStats
from ingestion.repositories.articles import JobRunRecorder, delete_expired_articles, upsert_article
from ingestion.services.extractor import extract_items
from ingestion.services.normalizer import normalize_feed
from ingestion.settings import Settings, get_settings
from ingestion.utils.logging import get_logger


logger = get_logger(__name__)


def _ensure_schema() -> None:
    # For local runs/tests, ensure schema exists (idempotent)
    engine = get_engine()
    Base.metadata.create_all(bind=engine)


def process_feed(
    source: FeedSource,
    fetcher: BaseFeedConnector,
    *,
    max_items: int,
    excerpt_chars: int = 200,
    now: Optional[datetime] = None,
) -> FeedOutcome:
    """Fetch, extract and normalize one feed. Feed-level failures are returned, not raised."""
    try:
        body = fetcher.fetch(source)
    except FeedFetchFailed as exc:
        return FeedOutcome(source=source, error=str(exc), status_code=exc.status_code)

    items = extract_items(body)
    if not items:
        return FeedOutcome(source=source, error=str(MalformedFeedBody(source.source_name)))

    articles = normalize_feed(items, source, max_items=max_items, now=now, excerpt_chars=excerpt_chars)
    return FeedOutcome(source=source, articles=articles)


def iter_feed_outcomes(
    registry: Sequence[FeedSource],
    fetcher: BaseFeedConnector,
    *,
    settings: Settings,
    now: Optional[datetime] = None,
) -> Iterator[FeedOutcome]:
    """Process feeds concurrently and yield outcomes as they complete."""
    if not registry:
        return
    workers = min(int(settings.feed_concurrency), len(registry))
    pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="feed")
    exhausted = False
    try:
        futures = {
            pool.submit(
                process_feed,
                source,
                fetcher,
                max_items=int(settings.feed_max_items),
                excerpt_chars=int(settings.excerpt_max_chars),
                now=now,
            ): source
            for source in registry
        }
        for future in as_completed(futures):
            source = futures[future]
            try:
                outcome = future.result()
            except Exception as exc:  # one broken feed must not stop the batch
                logger.exception("news_sync.feed_crashed", extra={"source": source.source_name})
                outcome = FeedOutcome(source=source, error=f"{type(exc).__name__}: {exc}")
            yield outcome
        exhausted = True
    finally:
        # Early close: drop queued feeds, do not join running ones
        pool.shutdown(wait=exhausted, cancel_futures=not exhausted)


def _persist_outcome(session: Session, outcome: FeedOutcome, trace_id: str) -> int:
    written = 0
    for article in outcome.articles:
        try:
            with session.begin_nested():
                upsert_article(session, article)
        except SQLAlchemyError as exc:
            logger.warning(
                "news_sync.article_write_failed",
                extra={
                    "trace_id": trace_id,
                    "source": outcome.source.source_name,
                    "article_id": article.id,
                    "error": str(exc),
                },
            )
            continue
        written += 1
    session.commit()
    return written


def sync_news_core(
    registry: Optional[Sequence[FeedSource]] = None,
    *,
    fetcher: Optional[BaseFeedConnector] = None,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None,
) -> SyncStats:
    """Sweep expired articles, then ingest every feed in ``registry``.

    Individual feed errors only move the ``failed_feeds`` counter; anything
    that escapes (e.g., the database being unreachable) fails the whole run.
    """
    cfg = settings or get_settings()
    feeds = tuple(DEFAULT_FEEDS if registry is None else registry)
    _ensure_schema()
    trace_id = str(uuid.uuid4())
    stats = SyncStats(total_feeds=len(feeds))
    logger.info("news_sync.start", extra={"trace_id": trace_id, "feeds": len(feeds)})

    owned_client: Optional[httpx.Client] = None
    if fetcher is None:
        owned_client = httpx.Client(limits=httpx.Limits(max_connections=int(cfg.feed_concurrency) * 2))
        fetcher = RSSFeedFetcher(cfg, client=owned_client)

    try:
        with session_scope() as session, JobRunRecorder(
            session, stage=JobStage.SYNC_NEWS, task_name="sync_sports_news", trace_id=trace_id
        ) as job:
            stats.old_articles_deleted = delete_expired_articles(
                session, retention_days=int(cfg.article_retention_days), now=now
            )
            session.commit()
            logger.info(
                "news_sync.swept",
                extra={"trace_id": trace_id, "deleted": stats.old_articles_deleted},
            )

            with closing(iter_feed_outcomes(feeds, fetcher, settings=cfg, now=now)) as outcomes:
                for outcome in outcomes:
                    written = _persist_outcome(session, outcome, trace_id) if outcome.articles else 0
                    if written:
                        stats.successful_feeds += 1
                        stats.total_articles += written
                        continue
                    stats.failed_feeds += 1
                    logger.warning(
                        "news_sync.feed_failed",
                        extra={
                            "trace_id": trace_id,
                            "source": outcome.source.source_name,
                            "status_code": outcome.status_code,
                            "error": outcome.error or "no articles written",
                        },
                    )

            job.items_processed = stats.total_articles
            job.items_failed = stats.failed_feeds
    finally:
        if owned_client is not None:
            owned_client.close()

    logger.info(
        "news_sync.done",
        extra={
            "trace_id": trace_id,
            "total_articles": stats.total_articles,
            "successful_feeds": stats.successful_feeds,
            "failed_feeds": stats.failed_feeds,
            "finished_at": datetime.now(timezone.utc).isoformat(),
        },
    )
    return stats


@shared_task(name="ingestion.tasks.sync_news.sync_sports_news")
def sync_sports_news() -> dict:  # pragma: no cover - wrapper
    return sync_news_core().as_response()
