"""
Sequential feed ingestion.

Feeds are fetched one at a time, in catalog order. A failing feed is logged
and skipped; it never aborts the rest of the run.
"""

import logging
import time
from typing import Callable, Iterator, List, Optional, Sequence

from oncoreader.exceptions import FeedFetchError, FeedParseError
from oncoreader.models import Article, FeedSource, IngestEvent
from oncoreader.parsers.base import FeedParser
from oncoreader.services.relay import RelayClient

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float, str], None]


def iter_ingest(
    feeds: Sequence[FeedSource],
    relay: RelayClient,
    parser: FeedParser,
    delay_seconds: float = 0.0,
) -> Iterator[IngestEvent]:
    """
    Yields the events of one ingestion run.

    Two events are produced per feed: one announcing the fetch (articles is
    None) and one carrying the feed's articles, or the error that made it
    contribute none.
    """
    total = len(feeds)
    for index, feed in enumerate(feeds):
        percent = (index + 1) / total * 100
        yield IngestEvent(percent, f"Fetching {feed['name']}...", feed)

        if index > 0 and delay_seconds > 0:
            time.sleep(delay_seconds)

        try:
            document = relay.fetch(feed)
            articles = parser.parse(feed["name"], document)
        except (FeedFetchError, FeedParseError) as e:
            logger.error("Failed to fetch %s: %s", feed["name"], e)
            yield IngestEvent(percent, f"Failed {feed['name']}", feed, [], e)
            continue
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.exception("Unexpected error ingesting %s", feed["name"])
            yield IngestEvent(percent, f"Failed {feed['name']}", feed, [], e)
            continue

        logger.info("Fetched %d articles from %s.", len(articles), feed["name"])
        yield IngestEvent(percent, f"Fetched {feed['name']}", feed, articles)


def fetch_articles(
    feeds: Sequence[FeedSource],
    relay: RelayClient,
    parser: FeedParser,
    on_progress: Optional[ProgressCallback] = None,
    delay_seconds: float = 0.0,
) -> List[Article]:
    """Runs one ingestion and returns every article, in catalog order."""
    all_articles: List[Article] = []
    logger.info("--- Starting sync of %d feeds ---", len(feeds))

    for event in iter_ingest(feeds, relay, parser, delay_seconds):
        if event.articles is None:
            if on_progress:
                on_progress(event.percent, event.message)
            continue
        all_articles.extend(event.articles)

    logger.info("Sync finished with %d articles.", len(all_articles))
    return all_articles
