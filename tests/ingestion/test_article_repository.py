from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from ingestion.db.models import Base, JobRun, JobStage, JobStatus, NewsArticle
from ingestion.models.domain import ArticleDTO, FeedCategory
from ingestion.repositories.articles import (
    JobRunRecorder,
    delete_expired_articles,
    list_recent_articles,
    upsert_article,
)


NOW = datetime(2025, 6, 12, 12, 0, tzinfo=timezone.utc)


@pytest.fixture()
def session(tmp_path: Path):
    engine = create_engine(f"sqlite:///{tmp_path / 'articles.db'}", future=True)
    Base.metadata.create_all(engine)
    with Session(engine, expire_on_commit=False) as s:
        yield s


def _dto(article_id: str, *, title: str = "Title", category=FeedCategory.FOOTBALL, age_hours: int = 1) -> ArticleDTO:
    return ArticleDTO(
        id=article_id,
        title=title,
        excerpt="excerpt",
        content="content",
        image="https://images.example.com/x.jpg",
        category=category,
        published_at=NOW - timedelta(hours=age_hours),
        source_name="Example",
        link=f"https://example.com/{article_id}",
    )


def test_upsert_replaces_existing_row(session: Session):
    upsert_article(session, _dto("news-a-1", title="First headline"))
    session.commit()
    upsert_article(session, _dto("news-a-1", title="Updated headline"))
    session.commit()

    rows = session.scalars(select(NewsArticle)).all()
    assert len(rows) == 1
    assert rows[0].title == "Updated headline"
    assert rows[0].category == "Football"


def test_delete_expired_uses_retention_window(session: Session):
    upsert_article(session, _dto("news-fresh", age_hours=47))
    upsert_article(session, _dto("news-stale", age_hours=49))
    session.commit()

    deleted = delete_expired_articles(session, retention_days=2, now=NOW)
    session.commit()

    assert deleted == 1
    assert [a.id for a in session.scalars(select(NewsArticle)).all()] == ["news-fresh"]


def test_list_recent_articles_filters_and_orders(session: Session):
    upsert_article(session, _dto("news-old", age_hours=10))
    upsert_article(session, _dto("news-new", age_hours=1))
    upsert_article(session, _dto("news-tennis", category=FeedCategory.TENNIS, age_hours=2))
    session.commit()

    assert [a.id for a in list_recent_articles(session)] == ["news-new", "news-tennis", "news-old"]
    assert [a.id for a in list_recent_articles(session, category="Football", limit=1)] == ["news-new"]


def test_job_run_recorder_marks_failure(session: Session):
    with pytest.raises(ValueError):
        with JobRunRecorder(session, stage=JobStage.SYNC_NEWS, task_name="sync_sports_news", trace_id="t-1"):
            raise ValueError("boom")

    job = session.scalars(select(JobRun)).one()
    assert job.status == JobStatus.FAILED
    assert job.error_message == "boom"
    assert job.finished_at is not None
