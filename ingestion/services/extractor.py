"""Tolerant, regex-based extraction of ``<item>`` blocks from RSS-like XML.

Third-party feeds are frequently not well-formed (unescaped ampersands,
truncated documents, mixed CDATA and plain text), so no XML parser is
involved: each ``<item>`` block is matched on its own and a block that lacks
a title or link is skipped without affecting its siblings.
"""

from __future__ import annotations

import html
import re
from typing import List, Optional

from ingestion.models.domain import RawFeedItem


_ITEM_RE = re.compile(r"<item\b[^>]*>(.*?)</item\s*>", re.IGNORECASE | re.DOTALL)
_ATTR_RE = re.compile(r"""([\w:-]+)\s*=\s*["']([^"']*)["']""")


def _text_field(tag: str) -> re.Pattern[str]:
    # Either a CDATA section or plain text up to the next tag.
    return re.compile(
        rf"<{tag}(?:\s[^>]*)?>\s*(?:<!\[CDATA\[(.*?)\]\]>|([^<]*))\s*</{tag}\s*>",
        re.IGNORECASE | re.DOTALL,
    )


_TITLE_RE = _text_field("title")
_LINK_RE = _text_field("link")
_DESCRIPTION_RE = _text_field("description")
_PUBDATE_RE = _text_field("pubDate")
_MEDIA_CONTENT_RE = re.compile(r"<media:content\b([^>]*)>", re.IGNORECASE)
_MEDIA_THUMBNAIL_RE = re.compile(r"<media:thumbnail\b([^>]*)>", re.IGNORECASE)
_ENCLOSURE_RE = re.compile(r"<enclosure\b([^>]*)>", re.IGNORECASE)


def _attrs(fragment: str) -> dict[str, str]:
    return {name.lower(): value for name, value in _ATTR_RE.findall(fragment)}


def _match_text(pattern: re.Pattern[str], block: str, *, decode_plain: bool = False) -> str:
    match = pattern.search(block)
    if match is None:
        return ""
    if match.group(1) is not None:
        return match.group(1).strip()
    # Outside CDATA the payload is XML-escaped
    value = (match.group(2) or "").strip()
    return html.unescape(value) if decode_plain else value


def _first_url(pattern: re.Pattern[str], block: str, *, image_type_only: bool = False) -> Optional[str]:
    for fragment in pattern.findall(block):
        attrs = _attrs(fragment)
        url = attrs.get("url", "").strip()
        if not url:
            continue
        if image_type_only and not attrs.get("type", "").lower().startswith("image"):
            continue
        return html.unescape(url)
    return None


def extract_image(block: str) -> Optional[str]:
    """media:content, then media:thumbnail, then an image enclosure."""
    return (
        _first_url(_MEDIA_CONTENT_RE, block)
        or _first_url(_MEDIA_THUMBNAIL_RE, block)
        or _first_url(_ENCLOSURE_RE, block, image_type_only=True)
    )


def parse_item_block(block: str) -> Optional[RawFeedItem]:
    """Build a RawFeedItem from the inside of one ``<item>``; None if title or link is missing."""
    title = html.unescape(_match_text(_TITLE_RE, block)).strip()
    link = html.unescape(_match_text(_LINK_RE, block)).strip()
    if not title or not link:
        return None
    return RawFeedItem(
        title=title,
        link=link,
        description=_match_text(_DESCRIPTION_RE, block, decode_plain=True),
        pub_date=html.unescape(_match_text(_PUBDATE_RE, block)),
        image_url=extract_image(block),
    )


def extract_items(xml_text: object) -> List[RawFeedItem]:
    """Return the valid items of a feed body in document order. Never raises."""
    if not isinstance(xml_text, str) or not xml_text:
        return []
    items: List[RawFeedItem] = []
    for match in _ITEM_RE.finditer(xml_text):
        item = parse_item_block(match.group(1))
        if item is not None:
            items.append(item)
    return items
