"""Quality score lookups consumed by the scoring pipeline.

Scores come from the moderation step, which runs outside this service; the
pipeline only reads them.
"""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from ingestion.db.models import ContentModeration


class QualityScoreProvider(Protocol):
    def get(self, post_id: str) -> Optional[float]: ...  # noqa: D401


class StaticQualityScoreProvider:
    """Fixed mapping, for tests and backfills."""

    def __init__(self, scores: Mapping[str, float] | None = None) -> None:
        self._scores = dict(scores or {})

    def get(self, post_id: str) -> Optional[float]:
        return self._scores.get(post_id)


class DatabaseQualityScoreProvider:
    """Reads ``content_moderation.quality_score``; ``prefetch`` batches the lookups."""

    def __init__(self, session: Session) -> None:
        self._session = session
        self._cache: Dict[str, Optional[float]] = {}

    def prefetch(self, post_ids: Iterable[str]) -> None:
        wanted = [pid for pid in post_ids if pid not in self._cache]
        if not wanted:
            return
        rows = self._session.execute(
            select(ContentModeration.post_id, ContentModeration.quality_score).where(
                ContentModeration.post_id.in_(wanted)
            )
        )
        found = {post_id: score for post_id, score in rows}
        for pid in wanted:
            self._cache[pid] = found.get(pid)

    def get(self, post_id: str) -> Optional[float]:
        if post_id not in self._cache:
            self.prefetch([post_id])
        return self._cache[post_id]


def resolve_quality(provider: QualityScoreProvider, post_id: str, default: float) -> float:
    """Provider score clamped to 0..100, or ``default`` when missing."""
    score = provider.get(post_id)
    if score is None:
        return default
    return max(0.0, min(100.0, float(score)))
