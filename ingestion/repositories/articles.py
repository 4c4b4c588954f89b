"""Repositories for persisting news articles and job runs."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ingestion.db.models import JobRun, JobStage, JobStatus, NewsArticle
from ingestion.models.domain import ArticleDTO


def upsert_article(session: Session, dto: ArticleDTO) -> NewsArticle:
    """Insert or replace the article row keyed by ``dto.id``."""
    entity = NewsArticle(
        id=dto.id,
        title=dto.title[:512],
        excerpt=dto.excerpt,
        content=dto.content,
        image=dto.image,
        category=dto.category.value,
        published_at=dto.published_at,
        source_name=dto.source_name,
        link=dto.link,
    )
    merged = session.merge(entity)
    session.flush()
    return merged


def delete_expired_articles(session: Session, *, retention_days: int, now: Optional[datetime] = None) -> int:
    """Delete articles published before ``now - retention_days``; returns the row count."""
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=retention_days)
    result = session.execute(
        delete(NewsArticle).where(NewsArticle.published_at < cutoff).execution_options(synchronize_session=False)
    )
    return int(result.rowcount or 0)


def list_recent_articles(session: Session, *, category: Optional[str] = None, limit: int = 20) -> List[NewsArticle]:
    stmt = select(NewsArticle).order_by(NewsArticle.published_at.desc(), NewsArticle.id).limit(limit)
    if category:
        stmt = stmt.where(NewsArticle.category == category)
    return list(session.scalars(stmt).all())


class JobRunRecorder:
    """Context manager to record job run lifecycle."""

    def __init__(
        self,
        session: Session,
        *,
        stage: JobStage,
        task_name: str,
        trace_id: str | None = None,
    ) -> None:
        self._session = session
        self._job = JobRun(
            stage=stage,
            status=JobStatus.RUNNING,
            task_name=task_name,
            trace_id=trace_id,
            started_at=datetime.now(timezone.utc),
        )

    def __enter__(self) -> JobRun:
        self._session.add(self._job)
        # Durable RUNNING record even if the cycle later fails
        self._session.commit()
        return self._job

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        if exc is not None:
            # Discard the failed unit of work, keep the job row
            self._session.rollback()
            self._job.status = JobStatus.FAILED
            self._job.error_message = str(exc)[:512]
        else:
            self._job.status = JobStatus.SUCCEEDED
        self._job.finished_at = datetime.now(timezone.utc)
        self._session.add(self._job)
        try:
            self._session.commit()
        except Exception:  # pragma: no cover - do not mask original error
            self._session.rollback()
