"""Earnings, rewards and ranking formulas.

Everything here is pure: inputs are plain DTOs, nothing touches the database.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping

from scoring.models.domain import EarningsBreakdown, PostMetrics, RankedWriter, WriterStats


CPM_RATE = 0.50  # per 1000 views
ENGAGEMENT_RATE = 0.05  # per weighted engagement unit
QUALITY_MULTIPLIER = 1.5
QUALITY_THRESHOLD = 70
QUALITY_BONUS_THRESHOLD = 80
QUALITY_BONUS_POINTS = 10
POINTS_PER_LEVEL = 1000

RANK_VIEW_WEIGHT = 0.5
RANK_ENGAGEMENT_WEIGHT = 2
RANK_POST_WEIGHT = 10


def level_for_points(points: int) -> int:
    return int(points) // POINTS_PER_LEVEL + 1


def engagement_score(metrics: PostMetrics) -> float:
    weighted = metrics.likes_count + metrics.comments_count * 2 + metrics.shares_count * 3
    return min(100.0, weighted / max(1, metrics.views_count) * 100)


def compute_post_earnings(metrics: PostMetrics, quality_score: float) -> EarningsBreakdown:
    multiplier = QUALITY_MULTIPLIER if quality_score > QUALITY_THRESHOLD else 1.0
    views_earnings = (metrics.views_count / 1000) * CPM_RATE
    total_engagement = metrics.likes_count + metrics.comments_count + metrics.shares_count * 2
    engagement_earnings = total_engagement * ENGAGEMENT_RATE
    earnings = (views_earnings + engagement_earnings) * multiplier
    return EarningsBreakdown(
        post_id=metrics.post_id,
        user_id=metrics.user_id,
        quality_score=quality_score,
        quality_multiplier=multiplier,
        views_earnings=views_earnings,
        total_engagement=total_engagement,
        engagement_earnings=engagement_earnings,
        earnings_amount=earnings,
        engagement_score=engagement_score(metrics),
        points=math.floor(earnings * 100),
        quality_bonus_points=QUALITY_BONUS_POINTS if quality_score > QUALITY_BONUS_THRESHOLD else 0,
    )


def aggregate_writer_stats(
    posts: Iterable[PostMetrics],
    quality_scores: Mapping[str, float],
) -> List[WriterStats]:
    """Group posts by author, preserving first-seen author order."""
    grouped: Dict[str, WriterStats] = {}
    qualities: Dict[str, List[float]] = {}
    for post in posts:
        stats = grouped.setdefault(post.user_id, WriterStats(user_id=post.user_id))
        stats.posts_count += 1
        stats.total_views += post.views_count
        stats.total_engagement += post.likes_count + post.comments_count
        if post.post_id in quality_scores:
            qualities.setdefault(post.user_id, []).append(float(quality_scores[post.post_id]))

    for user_id, stats in grouped.items():
        scores = qualities.get(user_id)
        stats.quality_average = round(sum(scores) / len(scores), 2) if scores else 0.0
        stats.consistency_score = float(min(100, stats.posts_count * 10))
    return list(grouped.values())


def writer_score(stats: WriterStats) -> float:
    return (
        stats.total_views * RANK_VIEW_WEIGHT
        + stats.total_engagement * RANK_ENGAGEMENT_WEIGHT
        + stats.posts_count * RANK_POST_WEIGHT
    )


def rank_writers(stats: Iterable[WriterStats]) -> List[RankedWriter]:
    """Assign 1-based ranks by score, highest first.

    Ties keep the order in which authors were given (``sorted`` is stable),
    so the same input always produces the same ranking.
    """
    scored = [(writer_score(s), s) for s in stats]
    ordered = sorted(scored, key=lambda pair: pair[0], reverse=True)
    return [
        RankedWriter(**s.model_dump(), score=score, rank=index)
        for index, (score, s) in enumerate(ordered, start=1)
    ]
