"""Repository helpers for earnings, rewards and writer rankings."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from ingestion.db.models import BlogPost, ContentEarnings, UserRewards, WriterRanking
from scoring.models.domain import EarningsBreakdown, PostMetrics, RankedWriter
from scoring.services.calculator import level_for_points


def list_published_posts(session: Session) -> List[PostMetrics]:
    rows = session.scalars(select(BlogPost).where(BlogPost.published.is_(True)).order_by(BlogPost.created_at, BlogPost.id))
    return [
        PostMetrics(
            post_id=row.id,
            user_id=row.user_id,
            views_count=row.views_count,
            likes_count=row.likes_count,
            comments_count=row.comments_count,
            shares_count=row.shares_count,
        )
        for row in rows
    ]


def record_post_earnings(
    session: Session,
    metrics: PostMetrics,
    result: EarningsBreakdown,
    *,
    now: Optional[datetime] = None,
) -> UserRewards:
    """Store the post's earnings and credit its author with anything not yet credited.

    Credits are the positive difference between this cycle's values and what
    the post has already contributed, so re-running on unchanged counters adds
    nothing and falling counters never subtract.
    """
    ts = now or datetime.now(timezone.utc)
    earnings = session.get(ContentEarnings, result.post_id)
    if earnings is None:
        earnings = ContentEarnings(
            post_id=result.post_id,
            user_id=result.user_id,
            credited_points=0,
            credited_earnings=0.0,
            credited_views=0,
            credited_engagement=0,
            quality_bonus_awarded=False,
        )
        session.add(earnings)

    delta_points = max(0, result.points - earnings.credited_points)
    delta_earnings = max(0.0, result.earnings_amount - earnings.credited_earnings)
    delta_views = max(0, metrics.views_count - earnings.credited_views)
    delta_engagement = max(0, result.total_engagement - earnings.credited_engagement)
    bonus = result.quality_bonus_points if not earnings.quality_bonus_awarded else 0

    earnings.user_id = result.user_id
    earnings.views_count = metrics.views_count
    earnings.engagement_score = result.engagement_score
    earnings.earnings_amount = result.earnings_amount
    earnings.last_calculated = ts
    earnings.credited_points += delta_points
    earnings.credited_earnings += delta_earnings
    earnings.credited_views += delta_views
    earnings.credited_engagement += delta_engagement
    earnings.quality_bonus_awarded = earnings.quality_bonus_awarded or bool(bonus)

    rewards = session.get(UserRewards, result.user_id)
    if rewards is None:
        rewards = UserRewards(
            user_id=result.user_id,
            total_points=0,
            total_earnings=0.0,
            views_earned=0,
            engagement_earned=0,
            quality_bonus=0,
        )
        session.add(rewards)
    rewards.total_points += delta_points
    rewards.total_earnings += delta_earnings
    rewards.views_earned += delta_views
    rewards.engagement_earned += delta_engagement
    rewards.quality_bonus += bonus
    rewards.level = level_for_points(rewards.total_points)
    rewards.last_updated = ts
    session.flush()
    return rewards


def replace_writer_rankings(
    session: Session,
    ranking: Sequence[RankedWriter],
    *,
    now: Optional[datetime] = None,
) -> int:
    """Overwrite the ranking table; authors missing from ``ranking`` are removed."""
    ts = now or datetime.now(timezone.utc)
    session.execute(delete(WriterRanking))
    session.add_all(
        WriterRanking(
            user_id=w.user_id,
            score=w.score,
            posts_count=w.posts_count,
            total_views=w.total_views,
            total_engagement=w.total_engagement,
            quality_average=w.quality_average,
            consistency_score=w.consistency_score,
            rank=w.rank,
            last_updated=ts,
        )
        for w in ranking
    )
    session.flush()
    return len(ranking)


def list_writer_rankings(session: Session, *, limit: int = 50) -> List[WriterRanking]:
    return list(session.scalars(select(WriterRanking).order_by(WriterRanking.rank).limit(limit)).all())
