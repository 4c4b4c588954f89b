"""Database utilities for the news pipeline."""

from .models import (  # noqa: F401
    Base,
    BlogPost,
    ContentEarnings,
    ContentModeration,
    JobRun,
    JobStage,
    JobStatus,
    NewsArticle,
    UserRewards,
    WriterRanking,
)
from .session import get_engine, get_sessionmaker, session_scope  # noqa: F401

__all__ = [
    "Base",
    "BlogPost",
    "ContentEarnings",
    "ContentModeration",
    "JobRun",
    "JobStage",
    "JobStatus",
    "NewsArticle",
    "UserRewards",
    "WriterRanking",
    "get_engine",
    "get_sessionmaker",
    "session_scope",
]
