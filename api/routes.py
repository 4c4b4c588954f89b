from __future__ import annotations

import logging
from typing import Annotated, Optional, Sequence

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ingestion.connectors.base import BaseFeedConnector
from ingestion.feeds import DEFAULT_FEEDS
from ingestion.models.domain import FeedCategory, FeedSource
from ingestion.repositories.articles import list_recent_articles
from ingestion.tasks.sync_news import sync_news_core
from scoring.providers import QualityScoreProvider
from scoring.repositories.earnings import list_writer_rankings
from scoring.tasks.calculate import calculate_earnings_core

from .database import session_dependency
from .models import (
    Article,
    EarningsSyncResponse,
    ErrorResponse,
    NewsSyncResponse,
    SyncStatsPayload,
    WriterRankingEntry,
)

logger = logging.getLogger(__name__)

functions_router = APIRouter(prefix="/functions", tags=["functions"])
router = APIRouter(prefix="/api")

SessionDep = Annotated[Session, Depends(session_dependency)]


def feed_registry() -> Sequence[FeedSource]:
    return DEFAULT_FEEDS


def feed_fetcher() -> Optional[BaseFeedConnector]:
    # None lets the sync build its own pooled HTTP client
    return None


def quality_provider() -> Optional[QualityScoreProvider]:
    return None


def _failure(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content=ErrorResponse(error=str(exc) or type(exc).__name__).model_dump())


@functions_router.post(
    "/sync-sports-news",
    response_model=NewsSyncResponse,
    responses={500: {"model": ErrorResponse}},
)
def sync_sports_news_route(
    registry: Annotated[Sequence[FeedSource], Depends(feed_registry)],
    fetcher: Annotated[Optional[BaseFeedConnector], Depends(feed_fetcher)],
):
    try:
        stats = sync_news_core(registry, fetcher=fetcher)
    except Exception as exc:
        logger.exception("functions.sync_news_failed")
        return _failure(exc)
    return NewsSyncResponse(stats=SyncStatsPayload(**stats.as_response()))


@functions_router.post(
    "/calculate-earnings",
    response_model=EarningsSyncResponse,
    responses={500: {"model": ErrorResponse}},
)
def calculate_earnings_route(
    provider: Annotated[Optional[QualityScoreProvider], Depends(quality_provider)],
):
    try:
        result = calculate_earnings_core(quality_provider=provider)
    except Exception as exc:
        logger.exception("functions.calculate_earnings_failed")
        return _failure(exc)
    return EarningsSyncResponse(
        processed=result.processed,
        failed=result.failed,
        writersRanked=result.writers_ranked,
    )


@router.get("/news", response_model=list[Article])
def list_news_route(
    session: SessionDep,
    category: FeedCategory | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
) -> list[Article]:
    rows = list_recent_articles(session, category=category.value if category else None, limit=limit)
    return [Article.model_validate(row) for row in rows]


@router.get("/writer-rankings", response_model=list[WriterRankingEntry])
def list_writer_rankings_route(
    session: SessionDep,
    limit: int = Query(default=50, ge=1, le=200),
) -> list[WriterRankingEntry]:
    return [WriterRankingEntry.model_validate(row) for row in list_writer_rankings(session, limit=limit)]
