"""
Data models for the OncoReader application.
"""

from typing import List, NamedTuple, Optional, TypedDict

UNKNOWN_DATE = "Unknown"


class FeedSource(TypedDict):
    """Type definition for a catalog feed."""

    name: str
    url: str


class Article(TypedDict):
    """Type definition for an article."""

    id: str
    journal: str
    title: str
    link: str
    published_date: str  # YYYY-MM-DD, the raw date string, or UNKNOWN_DATE
    summary: str
    matched_keywords: List[str]  # Recomputed on every filter pass


class IngestEvent(NamedTuple):
    """One step of an ingestion run.

    ``articles`` is None while the feed is being fetched, and a list (possibly
    empty) once it has been retrieved. ``error`` is set when the feed failed.
    """

    percent: float
    message: str
    feed: FeedSource
    articles: Optional[List[Article]] = None
    error: Optional[Exception] = None
