import pytest

from scoring.models.domain import PostMetrics, WriterStats
from scoring.services.calculator import (
    aggregate_writer_stats,
    compute_post_earnings,
    engagement_score,
    level_for_points,
    rank_writers,
    writer_score,
)


def _post(post_id="p1", user_id="u1", **counts) -> PostMetrics:
    return PostMetrics(post_id=post_id, user_id=user_id, **counts)


def test_earnings_formula_matches_reference_numbers():
    metrics = _post(views_count=2000, likes_count=10, comments_count=5, shares_count=1)

    result = compute_post_earnings(metrics, quality_score=80)

    assert result.views_earnings == pytest.approx(1.0)
    assert result.total_engagement == 17
    assert result.engagement_earnings == pytest.approx(0.85)
    assert result.quality_multiplier == 1.5
    assert result.earnings_amount == pytest.approx(2.775)
    assert result.points == 277
    assert result.quality_bonus_points == 0
    assert result.engagement_score == pytest.approx(1.15)


def test_quality_thresholds_are_strict():
    metrics = _post(views_count=1000)

    assert compute_post_earnings(metrics, 70).quality_multiplier == 1.0
    assert compute_post_earnings(metrics, 70.5).quality_multiplier == 1.5
    assert compute_post_earnings(metrics, 80).quality_bonus_points == 0
    assert compute_post_earnings(metrics, 81).quality_bonus_points == 10


def test_missing_counters_are_zero():
    metrics = PostMetrics(post_id="p1", user_id="u1", views_count=None, likes_count=None)

    result = compute_post_earnings(metrics, 50)

    assert result.earnings_amount == 0
    assert result.points == 0
    assert result.engagement_score == 0


def test_engagement_score_is_capped_and_survives_zero_views():
    assert engagement_score(_post(views_count=0, likes_count=1)) == 100.0
    assert engagement_score(_post(views_count=10, likes_count=50)) == 100.0
    assert engagement_score(_post(views_count=200, likes_count=1, comments_count=1)) == pytest.approx(1.5)


@pytest.mark.parametrize("points, level", [(0, 1), (999, 1), (1000, 2), (2500, 3)])
def test_level_for_points(points, level):
    assert level_for_points(points) == level


def test_aggregate_groups_by_author_in_first_seen_order():
    posts = [
        _post("p1", "bob", views_count=100, likes_count=4, comments_count=1, shares_count=9),
        _post("p2", "alice", views_count=50),
        _post("p3", "bob", views_count=20, likes_count=1),
    ]

    stats = aggregate_writer_stats(posts, {"p1": 90, "p2": 40, "p3": 75})

    assert [s.user_id for s in stats] == ["bob", "alice"]
    bob = stats[0]
    assert bob.posts_count == 2
    assert bob.total_views == 120
    # shares do not count toward ranking engagement
    assert bob.total_engagement == 6
    assert bob.quality_average == 82.5
    assert bob.consistency_score == 20


def test_consistency_score_caps_at_100():
    posts = [_post(f"p{i}", "prolific") for i in range(12)]

    (stats,) = aggregate_writer_stats(posts, {})

    assert stats.consistency_score == 100
    assert stats.quality_average == 0


def test_writer_score_formula():
    stats = WriterStats(user_id="u", posts_count=3, total_views=100, total_engagement=7)

    assert writer_score(stats) == 100 * 0.5 + 7 * 2 + 3 * 10


def test_ranking_orders_by_score_with_stable_ties():
    # posts_count alone drives the score here: 3 -> 30, 9 -> 90, 1 -> 10
    writers = [
        WriterStats(user_id="a", posts_count=3),
        WriterStats(user_id="b", posts_count=9),
        WriterStats(user_id="c", posts_count=9),
        WriterStats(user_id="d", posts_count=1),
    ]

    ranked = rank_writers(writers)

    assert [(w.user_id, w.score, w.rank) for w in ranked] == [
        ("b", 90, 1),
        ("c", 90, 2),
        ("a", 30, 3),
        ("d", 10, 4),
    ]
    assert rank_writers(writers) == ranked


def test_ranking_empty_input():
    assert rank_writers([]) == []
