"""Celery task and core logic for the earnings and ranking cycle."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Callable, Dict, Optional

from celery import shared_task
from sqlalchemy.exc import SQLAlchemyError

from ingestion.db.models import Base, JobStage
from ingestion.db.session import get_engine, session_scope
from ingestion.repositories.articles import JobRunRecorder
from ingestion.settings import get_settings
from ingestion.utils.logging import get_logger
from scoring.models.domain import ScoringResult
from scoring.providers import DatabaseQualityScoreProvider, QualityScoreProvider, resolve_quality
from scoring.repositories.earnings import (
    list_published_posts,
    record_post_earnings,
    replace_writer_rankings,
)
from scoring.services.calculator import aggregate_writer_stats, compute_post_earnings, rank_writers


# Provider factory injection point for tests (returns None to read content_moderation)
PROVIDER_FACTORY: Callable[[], Optional[QualityScoreProvider]] | None = None

logger = get_logger(__name__)


def _ensure_schema() -> None:
    engine = get_engine()
    Base.metadata.create_all(bind=engine)


def calculate_earnings_core(
    *,
    quality_provider: Optional[QualityScoreProvider] = None,
    now: Optional[datetime] = None,
) -> ScoringResult:
    """Score every published post, credit rewards, then rebuild the writer ranking.

    A post whose writes fail is rolled back on its own and counted in
    ``failed``; the rest of the batch continues.
    """
    _ensure_schema()
    settings = get_settings()
    trace_id = str(uuid.uuid4())
    result = ScoringResult()
    with session_scope() as session, JobRunRecorder(
        session, stage=JobStage.SCORING, task_name="calculate_earnings", trace_id=trace_id
    ) as job:
        posts = list_published_posts(session)
        logger.info("scoring.start", extra={"trace_id": trace_id, "posts": len(posts)})

        provider = quality_provider or (PROVIDER_FACTORY() if PROVIDER_FACTORY else None)
        if provider is None:
            db_provider = DatabaseQualityScoreProvider(session)
            db_provider.prefetch(p.post_id for p in posts)
            provider = db_provider

        qualities: Dict[str, float] = {}
        for post in posts:
            quality = resolve_quality(provider, post.post_id, settings.default_quality_score)
            qualities[post.post_id] = quality
            breakdown = compute_post_earnings(post, quality)
            try:
                with session.begin_nested():
                    record_post_earnings(session, post, breakdown, now=now)
            except SQLAlchemyError as exc:
                result.failed += 1
                logger.warning(
                    "scoring.post_failed",
                    extra={"trace_id": trace_id, "post_id": post.post_id, "error": str(exc)},
                )
                continue
            result.processed += 1

        ranking = rank_writers(aggregate_writer_stats(posts, qualities))
        result.writers_ranked = replace_writer_rankings(session, ranking, now=now)

        job.items_processed = result.processed
        job.items_failed = result.failed
        logger.info(
            "scoring.done",
            extra={
                "trace_id": trace_id,
                "processed": result.processed,
                "failed": result.failed,
                "writers_ranked": result.writers_ranked,
            },
        )
    return result


@shared_task(name="scoring.tasks.calculate.calculate_earnings")
def calculate_earnings() -> dict:  # pragma: no cover - thin wrapper
    return calculate_earnings_core().model_dump()
