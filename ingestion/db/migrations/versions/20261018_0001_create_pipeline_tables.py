"""Create news, scoring and job_runs tables"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "news_articles",
        sa.Column("id", sa.String(length=128), primary_key=True, nullable=False),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image", sa.String(length=2048), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source_name", sa.String(length=128), nullable=True),
        sa.Column("link", sa.String(length=2048), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_news_articles_published_at", "news_articles", ["published_at"], unique=False)
    op.create_index(
        "ix_news_articles_category_published",
        "news_articles",
        ["category", "published_at"],
        unique=False,
    )

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("title", sa.String(length=512), nullable=False, server_default=""),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("views_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("likes_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comments_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("shares_count", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_blog_posts_user_published", "blog_posts", ["user_id", "published"], unique=False)

    op.create_table(
        "content_moderation",
        sa.Column("post_id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("quality_score", sa.Float(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "content_earnings",
        sa.Column("post_id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("views_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("engagement_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("earnings_amount", sa.Float(), nullable=False, server_default="0"),
        sa.Column("last_calculated", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("credited_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("credited_earnings", sa.Float(), nullable=False, server_default="0"),
        sa.Column("credited_views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("credited_engagement", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quality_bonus_awarded", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_content_earnings_user", "content_earnings", ["user_id"], unique=False)

    op.create_table(
        "user_rewards",
        sa.Column("user_id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("total_points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_earnings", sa.Float(), nullable=False, server_default="0"),
        sa.Column("views_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("engagement_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quality_bonus", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        *_timestamps(),
    )

    op.create_table(
        "writer_rankings",
        sa.Column("user_id", sa.String(length=64), primary_key=True, nullable=False),
        sa.Column("score", sa.Float(), nullable=False),
        sa.Column("posts_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_engagement", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quality_average", sa.Float(), nullable=False, server_default="0"),
        sa.Column("consistency_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rank", sa.Integer(), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        *_timestamps(),
    )
    op.create_index("ix_writer_rankings_rank", "writer_rankings", ["rank"], unique=False)

    op.create_table(
        "job_runs",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column("stage", sa.String(length=16), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("task_name", sa.String(length=100), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("items_processed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("items_failed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.String(length=512), nullable=True),
        sa.Column("trace_id", sa.String(length=64), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_job_runs_stage_status", "job_runs", ["stage", "status"], unique=False)
    op.create_index("ix_job_runs_trace", "job_runs", ["trace_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_job_runs_trace", table_name="job_runs")
    op.drop_index("ix_job_runs_stage_status", table_name="job_runs")
    op.drop_table("job_runs")
    op.drop_index("ix_writer_rankings_rank", table_name="writer_rankings")
    op.drop_table("writer_rankings")
    op.drop_table("user_rewards")
    op.drop_index("ix_content_earnings_user", table_name="content_earnings")
    op.drop_table("content_earnings")
    op.drop_table("content_moderation")
    op.drop_index("ix_blog_posts_user_published", table_name="blog_posts")
    op.drop_table("blog_posts")
    op.drop_index("ix_news_articles_category_published", table_name="news_articles")
    op.drop_index("ix_news_articles_published_at", table_name="news_articles")
    op.drop_table("news_articles")
