from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SyncStatsPayload(BaseModel):
    totalArticles: int
    totalFeeds: int
    successfulFeeds: int
    failedFeeds: int
    oldArticlesDeleted: int


class NewsSyncResponse(BaseModel):
    success: bool = True
    message: str = "Sports news synced successfully"
    stats: SyncStatsPayload


class EarningsSyncResponse(BaseModel):
    success: bool = True
    processed: int
    failed: int = 0
    writersRanked: int = 0
    message: str = "Earnings and rankings calculated successfully"


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


class Article(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    excerpt: str
    content: str
    image: str
    category: str
    published_at: datetime
    source_name: Optional[str] = None
    link: Optional[str] = None


class WriterRankingEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    rank: int = Field(..., ge=1)
    score: float
    posts_count: int
    total_views: int
    total_engagement: int
    quality_average: float
    consistency_score: float
