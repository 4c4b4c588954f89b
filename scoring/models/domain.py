"""DTOs for the content scoring pipeline."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PostMetrics(BaseModel):
    """Engagement counters of one published post."""

    post_id: str
    user_id: str
    views_count: int = Field(0, ge=0)
    likes_count: int = Field(0, ge=0)
    comments_count: int = Field(0, ge=0)
    shares_count: int = Field(0, ge=0)

    @field_validator("views_count", "likes_count", "comments_count", "shares_count", mode="before")
    @classmethod
    def _none_to_zero(cls, v: Optional[int]) -> int:
        return 0 if v is None else v


class EarningsBreakdown(BaseModel):
    """Per-post result of the earnings formulas."""

    post_id: str
    user_id: str
    quality_score: float
    quality_multiplier: float
    views_earnings: float
    total_engagement: int
    engagement_earnings: float
    earnings_amount: float
    engagement_score: float = Field(..., ge=0, le=100)
    points: int = Field(..., ge=0)
    quality_bonus_points: int = Field(0, ge=0)


class WriterStats(BaseModel):
    user_id: str
    posts_count: int = 0
    total_views: int = 0
    total_engagement: int = 0
    quality_average: float = 0.0
    consistency_score: float = 0.0


class RankedWriter(WriterStats):
    score: float
    rank: int = Field(..., ge=1)


class ScoringResult(BaseModel):
    """Summary of one scoring cycle."""

    processed: int = 0
    failed: int = 0
    writers_ranked: int = 0
