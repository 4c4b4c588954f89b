"""SQLAlchemy models for news articles, scoring output and job runs."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SAEnum,
    Float,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import Uuid


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for ORM models."""


class TimestampMixin:
    """Adds created_at/updated_at columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class JobStage(str, Enum):
    SYNC_NEWS = "sync_news"
    SCORING = "scoring"


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class NewsArticle(TimestampMixin, Base):
    """Article ingested from an RSS feed; keyed by the link-derived id."""

    __tablename__ = "news_articles"
    __table_args__ = (
        Index("ix_news_articles_published_at", "published_at"),
        Index("ix_news_articles_category_published", "category", "published_at"),
    )

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    excerpt: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image: Mapped[str] = mapped_column(String(2048), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False)
    published_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    source_name: Mapped[str | None] = mapped_column(String(128))
    link: Mapped[str | None] = mapped_column(String(2048))


class BlogPost(TimestampMixin, Base):
    """User-authored post; engagement counters are maintained by the app."""

    __tablename__ = "blog_posts"
    __table_args__ = (Index("ix_blog_posts_user_published", "user_id", "published"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    views_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    comments_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    shares_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ContentModeration(TimestampMixin, Base):
    """Moderation verdicts written by the external moderation step."""

    __tablename__ = "content_moderation"

    post_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    quality_score: Mapped[float | None] = mapped_column(Float)


class ContentEarnings(TimestampMixin, Base):
    """Per-post earnings, recomputed every scoring cycle.

    The ``credited_*`` columns track how much of this post's value has already
    been added to the author's rewards.
    """

    __tablename__ = "content_earnings"
    __table_args__ = (Index("ix_content_earnings_user", "user_id"),)

    post_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    views_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    engagement_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    earnings_amount: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    last_calculated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    credited_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credited_earnings: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    credited_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    credited_engagement: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quality_bonus_awarded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class UserRewards(TimestampMixin, Base):
    """Cumulative rewards per user. Only ever increased."""

    __tablename__ = "user_rewards"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    total_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_earnings: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    views_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    engagement_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quality_bonus: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class WriterRanking(TimestampMixin, Base):
    """Global creator ranking, fully replaced every scoring cycle."""

    __tablename__ = "writer_rankings"
    __table_args__ = (Index("ix_writer_rankings_rank", "rank"),)

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    posts_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_engagement: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    quality_average: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    consistency_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)


class JobRun(TimestampMixin, Base):
    """Represents a single sync or scoring cycle."""

    __tablename__ = "job_runs"
    __table_args__ = (
        Index("ix_job_runs_stage_status", "stage", "status"),
        Index("ix_job_runs_trace", "trace_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    stage: Mapped[JobStage] = mapped_column(
        SAEnum(JobStage, name="job_stage", native_enum=False, length=16),
        nullable=False,
    )
    status: Mapped[JobStatus] = mapped_column(
        SAEnum(JobStatus, name="job_status", native_enum=False, length=16),
        nullable=False,
        default=JobStatus.PENDING,
    )
    task_name: Mapped[str | None] = mapped_column(String(100))
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    finished_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    items_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    items_failed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(String(512))
    trace_id: Mapped[str | None] = mapped_column(String(64))
