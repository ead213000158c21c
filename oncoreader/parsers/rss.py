"""
RSS feed parser implementation.

This module provides the RSSParser class, which normalizes the items of a raw
RSS/Atom document into Article records. Every field is read through an ordered
list of extractors; the first one that yields a non-empty value wins, so new
fallback sources only need to be appended to the relevant tuple.
"""

import io
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Union, cast

import feedparser  # type: ignore
from bs4 import BeautifulSoup, Tag
from dateutil import parser as date_parser

from oncoreader.exceptions import FeedParseError
from oncoreader.models import UNKNOWN_DATE, Article
from oncoreader.parsers.base import FeedParser

logger = logging.getLogger(__name__)

SUMMARY_LIMIT = 300
ELLIPSIS = "..."

_ANGLE_BRACKETS = re.compile(r"[<>]")


class FeedItem(NamedTuple):
    """One feed item, as feedparser normalized it and as it appears in the XML."""

    entry: Any
    element: Optional[Tag] = None


Extractor = Callable[[FeedItem], Optional[str]]


def _entry_field(name: str) -> Extractor:
    """Builds an extractor reading a plain text field of a feedparser entry."""

    def extract(item: FeedItem) -> Optional[str]:
        value = item.entry.get(name)
        return value if isinstance(value, str) else None

    return extract


def _element_child(name: str, namespaced: bool) -> Extractor:
    """Builds an extractor reading a direct child element of the raw item.

    ``namespaced`` selects prefixed children (``dc:date``) or bare ones
    (``date``).
    """

    def extract(item: FeedItem) -> Optional[str]:
        if item.element is None:
            return None
        for child in item.element.find_all(recursive=False):
            if child.name == name and bool(child.prefix) == namespaced:
                return child.get_text()
        return None

    return extract


def _first_content_block(item: FeedItem) -> Optional[str]:
    for block in item.entry.get("content") or []:
        value = block.get("value")
        if isinstance(value, str) and value.strip():
            return value
    return None


TITLE_EXTRACTORS: Sequence[Extractor] = (_entry_field("title"),)
LINK_EXTRACTORS: Sequence[Extractor] = (_entry_field("link"),)
# feedparser folds dc:date, a bare <date> and <updated> into one "updated"
# key, so the raw elements are read first and its fields are the last resort.
DATE_EXTRACTORS: Sequence[Extractor] = (
    _element_child("pubDate", namespaced=False),
    _element_child("date", namespaced=True),
    _element_child("date", namespaced=False),
    _element_child("updated", namespaced=False),
    _entry_field("published"),
    _entry_field("updated"),
    _entry_field("created"),
)
SUMMARY_EXTRACTORS: Sequence[Extractor] = (
    _entry_field("summary"),
    _first_content_block,
)


def first_match(
    item: FeedItem, extractors: Sequence[Extractor], default: str = ""
) -> str:
    """Returns the first non-empty value produced by the extractors."""
    for extract in extractors:
        value = extract(item)
        if value and value.strip():
            return value.strip()
    return default


def normalize_date(raw: Optional[str]) -> str:
    """Converts a feed date to YYYY-MM-DD, keeping the raw text if unparseable.

    Missing parts of partial dates default to January and the first day, so
    "March 2024" reads as 2024-03-01 whatever day the feed is fetched.
    """
    if not raw or not raw.strip() or raw == UNKNOWN_DATE:
        return UNKNOWN_DATE
    try:
        parsed = date_parser.parse(raw, default=datetime(datetime.now().year, 1, 1))
    except (ValueError, OverflowError):
        return raw
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def extract_plain_text(raw_html: Optional[str]) -> str:
    """Strips markup from a string, leaving no angle brackets behind."""
    if not raw_html:
        return ""
    try:
        soup = BeautifulSoup(raw_html, "html.parser")
        for tag in soup(["script", "style"]):
            tag.decompose()
        text = soup.get_text()
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.debug("Structured HTML parse failed, using text fallback: %s", e)
        text = raw_html
    # Entities such as &lt;script&gt; decode back into brackets.
    text = _ANGLE_BRACKETS.sub("", text)
    return " ".join(text.split())


def sanitize_summary(raw_html: Optional[str]) -> str:
    """Returns the plain-text summary, truncated and marked with an ellipsis."""
    return extract_plain_text(raw_html)[:SUMMARY_LIMIT] + ELLIPSIS


def make_article_id(link: str) -> str:
    """Uses the link as id, or a random token when the item has no link."""
    return link if link else uuid.uuid4().hex


def item_elements(document: bytes) -> List[Tag]:
    """Returns the raw <item>/<entry> elements of a feed, in document order."""
    try:
        soup = BeautifulSoup(document, "xml")
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.debug("Raw XML read failed, using feedparser fields only: %s", e)
        return []
    return soup.find_all(["item", "entry"])


class RSSParser(FeedParser):
    """Parses RSS and Atom feeds."""

    def _to_article(self, journal: str, item: FeedItem) -> Article:
        link = first_match(item, LINK_EXTRACTORS)
        raw_date = first_match(item, DATE_EXTRACTORS, default=UNKNOWN_DATE)
        return cast(
            Article,
            {
                "id": make_article_id(link),
                "journal": journal,
                "title": first_match(item, TITLE_EXTRACTORS),
                "link": link,
                "published_date": normalize_date(raw_date),
                "summary": sanitize_summary(first_match(item, SUMMARY_EXTRACTORS)),
                "matched_keywords": [],
            },
        )

    def parse(self, journal: str, document: Union[str, bytes]) -> List[Article]:
        """Parses one journal's feed document into articles."""
        if isinstance(document, str):
            document = document.encode("utf-8")

        # A stream keeps feedparser from treating the payload as a URL or path.
        feed = feedparser.parse(io.BytesIO(document))
        if feed.bozo and not feed.entries:
            raise FeedParseError(
                f"Invalid feed document for {journal}: "
                f"{feed.get('bozo_exception', 'no entries')}"
            )
        if feed.bozo:
            logger.warning(
                "Feed %s is not well-formed (%s); keeping %d entries.",
                journal,
                feed.get("bozo_exception"),
                len(feed.entries),
            )

        elements: List[Optional[Tag]] = list(item_elements(document))
        if len(elements) != len(feed.entries):
            # Raw items cannot be paired with entries; use feedparser alone.
            elements = [None] * len(feed.entries)
        return [
            self._to_article(journal, FeedItem(entry, element))
            for entry, element in zip(feed.entries, elements)
        ]
