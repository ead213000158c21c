"""
Relevance and filter pipeline.

Everything here is a pure function of its arguments: articles are annotated
into new records and filtered without reordering, so the pipeline can be
rerun on every preference change.
"""

import math
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, cast

from dateutil import parser as date_parser

from oncoreader.models import UNKNOWN_DATE, Article

VIEW_ALL = "all"
VIEW_INTERESTS = "interests"
VIEW_MODES = (VIEW_ALL, VIEW_INTERESTS)

RANGE_ALL = "all"
DATE_RANGES: Dict[str, Optional[int]] = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    RANGE_ALL: None,
}

_SECONDS_PER_DAY = 24 * 60 * 60


def parse_keywords(raw: Optional[str]) -> List[str]:
    """Splits a comma-separated keyword string into lowercase tokens."""
    keywords: List[str] = []
    for piece in (raw or "").split(","):
        token = piece.strip().lower()
        if token and token not in keywords:
            keywords.append(token)
    return keywords


def match_keywords(article: Article, keywords: Sequence[str]) -> List[str]:
    """Returns the keywords found in the article's title or summary."""
    content = f"{article['title']} {article['summary']}".lower()
    return [k for k in keywords if k in content]


def annotate(articles: Sequence[Article], keywords: Sequence[str]) -> List[Article]:
    """Returns copies of the articles with matched_keywords filled in."""
    return [
        cast(Article, {**a, "matched_keywords": match_keywords(a, keywords)})
        for a in articles
    ]


def article_datetime(article: Article) -> Optional[datetime]:
    """Reads the article date back as midnight UTC, or None if it has none."""
    raw = article["published_date"]
    if not raw or raw == UNKNOWN_DATE:
        return None
    try:
        parsed = date_parser.parse(raw)
    except (ValueError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def days_between(a: datetime, b: datetime) -> int:
    """Whole days between two instants, rounded up."""
    return math.ceil(abs((a - b).total_seconds()) / _SECONDS_PER_DAY)


def passes_view_mode(article: Article, view_mode: str) -> bool:
    """The interests view only admits articles with a keyword match."""
    if view_mode == VIEW_INTERESTS:
        return bool(article["matched_keywords"])
    return True


def passes_search(article: Article, search_term: Optional[str]) -> bool:
    """Case-insensitive match of the trimmed search term in the title."""
    term = (search_term or "").strip().lower()
    if not term:
        return True
    return term in article["title"].lower()


def passes_date_range(article: Article, date_range: str, now: datetime) -> bool:
    """
    Checks the article against a recency window.

    Articles without a readable date are excluded whenever a window is active.
    """
    limit = DATE_RANGES[date_range]
    if limit is None:
        return True
    published = article_datetime(article)
    if published is None:
        return False
    return days_between(now, published) <= limit


def filter_articles(
    articles: Sequence[Article],
    keywords: Sequence[str],
    view_mode: str = VIEW_ALL,
    search_term: Optional[str] = None,
    date_range: str = RANGE_ALL,
    now: Optional[datetime] = None,
) -> List[Article]:
    """Annotates the articles and keeps those passing every active filter."""
    if view_mode not in VIEW_MODES:
        raise ValueError(f"Unknown view mode: {view_mode!r}")
    if date_range not in DATE_RANGES:
        raise ValueError(f"Unknown date range: {date_range!r}")
    if now is None:
        now = datetime.now(timezone.utc)

    return [
        a
        for a in annotate(articles, keywords)
        if passes_view_mode(a, view_mode)
        and passes_search(a, search_term)
        and passes_date_range(a, date_range, now)
    ]
