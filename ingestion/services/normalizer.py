"""Turn extracted feed items into storable articles.

Normalization never raises: every malformed field degrades to a safe default
(empty text, category fallback image, ingestion time for the publish date).
Items are only ever dropped earlier, by the extractor.
"""

from __future__ import annotations

import hashlib
import re
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup
from dateutil.parser import parse as parse_date

from ingestion.models.domain import ArticleDTO, FeedCategory, FeedSource, RawFeedItem


FALLBACK_IMAGES = {
    FeedCategory.FOOTBALL: "https://images.unsplash.com/photo-1522778119026-d647f0596c20?w=800&h=500&fit=crop",
    FeedCategory.BASKETBALL: "https://images.unsplash.com/photo-1546519638-68e109498ffc?w=800&h=500&fit=crop",
    FeedCategory.TENNIS: "https://images.unsplash.com/photo-1622279457486-62dcc4a431d6?w=800&h=500&fit=crop",
    FeedCategory.BASEBALL: "https://images.unsplash.com/photo-1566577739112-5180d4bf9390?w=800&h=500&fit=crop",
    FeedCategory.GENERAL: "https://images.unsplash.com/photo-1461896836934-ffe607ba8211?w=800&h=500&fit=crop",
}

# Timezone abbreviations seen in RFC-822 pubDates
TZINFOS = {
    "EST": timezone(timedelta(hours=-5)),
    "EDT": timezone(timedelta(hours=-4)),
    "CST": timezone(timedelta(hours=-6)),
    "CDT": timezone(timedelta(hours=-5)),
    "MST": timezone(timedelta(hours=-7)),
    "MDT": timezone(timedelta(hours=-6)),
    "PST": timezone(timedelta(hours=-8)),
    "PDT": timezone(timedelta(hours=-7)),
    "GMT": timezone.utc,
    "UTC": timezone.utc,
    "Z": timezone.utc,
    "BST": timezone(timedelta(hours=1)),
    "CET": timezone(timedelta(hours=1)),
    "CEST": timezone(timedelta(hours=2)),
    "AEST": timezone(timedelta(hours=10)),
    "AEDT": timezone(timedelta(hours=11)),
    "JST": timezone(timedelta(hours=9)),
    "KST": timezone(timedelta(hours=9)),
}

ID_PREFIX = "news"
SLUG_MAX_CHARS = 50
ID_HASH_CHARS = 10
ELLIPSIS = "..."
NON_CONTENT_TAGS = ["script", "style", "noscript", "iframe"]

_WS_RE = re.compile(r"\s+")
_NON_SLUG_RE = re.compile(r"[^a-zA-Z0-9]")


def strip_html(raw: Optional[str]) -> str:
    """Plain text of an HTML fragment; script/style bodies are dropped and whitespace collapsed."""
    if not raw or not raw.strip():
        return ""
    soup = BeautifulSoup(raw, "html.parser")
    for element in soup(NON_CONTENT_TAGS):
        element.decompose()
    text = soup.get_text(separator=" ", strip=True)
    return _WS_RE.sub(" ", text).strip()


def make_excerpt(text: str, max_chars: int = 200) -> str:
    if len(text) > max_chars:
        return text[:max_chars] + ELLIPSIS
    return text


def fallback_image(category: object) -> str:
    return FALLBACK_IMAGES.get(FeedCategory.coerce(category), FALLBACK_IMAGES[FeedCategory.GENERAL])


def derive_article_id(link: str) -> str:
    """Stable id for a link: readable slug plus a short content hash.

    The same link always yields the same id, so re-ingesting an article
    overwrites its row instead of adding a new one.
    """
    cleaned = (link or "").strip()
    path = urlsplit(cleaned).path if "://" in cleaned else cleaned
    segments = [seg for seg in path.split("/") if seg]
    slug = _NON_SLUG_RE.sub("-", segments[-1])[:SLUG_MAX_CHARS] if segments else ""
    digest = hashlib.sha256(cleaned.encode("utf-8")).hexdigest()[:ID_HASH_CHARS]
    return f"{ID_PREFIX}-{slug or 'article'}-{digest}"


def parse_published_at(raw: Optional[str], now: Optional[datetime] = None) -> datetime:
    """Parse a feed timestamp into an aware UTC datetime, or return ``now``."""
    fallback = now or datetime.now(timezone.utc)
    if not raw or not raw.strip():
        return fallback
    try:
        dt = parse_date(raw.strip(), tzinfos=TZINFOS)
    except (ValueError, OverflowError, TypeError):
        return fallback
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def normalize_item(
    item: RawFeedItem,
    source: FeedSource,
    *,
    now: Optional[datetime] = None,
    excerpt_chars: int = 200,
) -> ArticleDTO:
    content = strip_html(item.description)
    return ArticleDTO(
        id=derive_article_id(item.link),
        title=item.title,
        excerpt=make_excerpt(content, excerpt_chars),
        content=content,
        image=item.image_url or fallback_image(source.category),
        category=source.category,
        published_at=parse_published_at(item.pub_date, now),
        source_name=source.source_name,
        link=item.link,
    )


def normalize_feed(
    items: Iterable[RawFeedItem],
    source: FeedSource,
    *,
    max_items: int = 3,
    now: Optional[datetime] = None,
    excerpt_chars: int = 200,
) -> List[ArticleDTO]:
    """Normalize the first ``max_items`` items of a feed, in feed order."""
    articles: List[ArticleDTO] = []
    for item in items:
        if len(articles) >= max_items:
            break
        articles.append(normalize_item(item, source, now=now, excerpt_chars=excerpt_chars))
    return articles
