"""Domain DTOs for the news ingestion pipeline."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FeedCategory(str, Enum):
    FOOTBALL = "Football"
    BASKETBALL = "Basketball"
    TENNIS = "Tennis"
    BASEBALL = "Baseball"
    GENERAL = "General"

    @classmethod
    def coerce(cls, value: Any) -> "FeedCategory":
        """Map arbitrary input onto a category, defaulting to GENERAL."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return cls.GENERAL


class FeedSource(BaseModel):
    """A single RSS endpoint to poll."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="RSS 엔드포인트 URL")
    category: FeedCategory = Field(FeedCategory.GENERAL, description="기사 카테고리")
    source_name: str = Field(..., description="표시용 출처 이름")

    @field_validator("url", "source_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("빈 문자열은 허용되지 않습니다.")
        return s


class RawFeedItem(BaseModel):
    """Fields pulled out of one ``<item>`` block, before normalization."""

    title: str
    link: str
    description: str = ""
    pub_date: str = ""
    image_url: Optional[str] = None


class ArticleDTO(BaseModel):
    """Normalized article ready to be upserted."""

    id: str = Field(..., max_length=128, description="링크 기반 결정적 식별자")
    title: str
    excerpt: str
    content: str
    image: str
    category: FeedCategory
    published_at: datetime
    source_name: Optional[str] = None
    link: Optional[str] = None


class FeedOutcome(BaseModel):
    """Result of processing one feed inside a sync cycle."""

    source: FeedSource
    articles: List[ArticleDTO] = Field(default_factory=list)
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.articles)


class SyncStats(BaseModel):
    """Aggregate run summary returned by a news sync cycle."""

    total_articles: int = 0
    total_feeds: int = 0
    successful_feeds: int = 0
    failed_feeds: int = 0
    old_articles_deleted: int = 0

    def as_response(self) -> Dict[str, int]:
        return {
            "totalArticles": self.total_articles,
            "totalFeeds": self.total_feeds,
            "successfulFeeds": self.successful_feeds,
            "failedFeeds": self.failed_feeds,
            "oldArticlesDeleted": self.old_articles_deleted,
        }
