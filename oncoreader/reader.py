"""
OncoReader
This module owns the reader state: it syncs the selected journal feeds
through the relay, filters the articles by interest, search and recency,
and asks Gemini for per-article analyses. `main` is a small command-line
front end over the same controller.
"""

import argparse
import logging
import sys
import threading
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from oncoreader import config as app_config
from oncoreader.catalog import FEEDS
from oncoreader.exceptions import IngestionInProgressError, SummarizationError
from oncoreader.filters import (
    DATE_RANGES,
    RANGE_ALL,
    VIEW_ALL,
    VIEW_MODES,
    filter_articles,
    parse_keywords,
)
from oncoreader.ingest import ProgressCallback, fetch_articles
from oncoreader.models import Article, FeedSource
from oncoreader.parsers.base import FeedParser
from oncoreader.parsers.rss import RSSParser
from oncoreader.services.llm import LLMService
from oncoreader.services.preferences import Preferences, build_preference_store
from oncoreader.services.relay import RelayClient

logger = logging.getLogger(__name__)


class ReaderController:
    """Single owner of the article collection, preferences and analyses."""

    def __init__(
        self,
        preferences: Preferences,
        relay: RelayClient,
        llm: LLMService,
        parser: Optional[FeedParser] = None,
        delay_seconds: float = 0.0,
    ):
        self.preferences = preferences
        self.relay = relay
        self.llm = llm
        self.parser = parser or RSSParser()
        self.delay_seconds = delay_seconds
        self.articles: List[Article] = []
        self.analyses: Dict[str, str] = {}
        self._run_lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        """True while a sync is in flight."""
        return self._run_lock.locked()

    def keywords(self) -> List[str]:
        """The parsed keyword set from the current preferences."""
        return parse_keywords(self.preferences.keywords)

    def refresh(self, on_progress: Optional[ProgressCallback] = None) -> List[Article]:
        """Runs one ingestion of the selected feeds and replaces the articles."""
        if not self._run_lock.acquire(blocking=False):
            raise IngestionInProgressError("A sync is already running.")
        try:
            articles = fetch_articles(
                self.preferences.selected_sources(),
                self.relay,
                self.parser,
                on_progress=on_progress,
                delay_seconds=self.delay_seconds,
            )
            self.articles = articles
            self.analyses = {}
            return articles
        finally:
            self._run_lock.release()

    def visible_articles(
        self,
        view_mode: str = VIEW_ALL,
        search_term: Optional[str] = None,
        date_range: str = RANGE_ALL,
        now: Optional[datetime] = None,
    ) -> List[Article]:
        """The articles that pass the given filters, annotated with keywords."""
        return filter_articles(
            self.articles, self.keywords(), view_mode, search_term, date_range, now
        )

    def analyze(self, article_id: str) -> str:
        """Gets an AI analysis for one article and remembers it by id."""
        article = next((a for a in self.articles if a["id"] == article_id), None)
        if article is None:
            raise KeyError(article_id)
        text = self.llm.summarize(article["title"], article["summary"])
        self.analyses[article_id] = text
        return text


def build_controller(config_filename: str = "config.json") -> ReaderController:
    """Wires a controller from configuration and environment."""
    config = app_config.load_config(config_filename)
    store = build_preference_store(config, app_config.gcp_project_id())
    preferences = Preferences(store, FEEDS, config["default_keywords"])
    return ReaderController(
        preferences,
        RelayClient.from_config(config),
        LLMService(app_config.gemini_api_key(), config["gemini_model"]),
        delay_seconds=config["request_delay_seconds"],
    )


def _print_progress(percent: float, message: str) -> None:
    print(f"[{percent:5.1f}%] {message}")


def _print_articles(articles: Sequence[Article]) -> None:
    if not articles:
        print("No articles match the current filters.")
        return
    for index, article in enumerate(articles, start=1):
        tags = ", ".join(article["matched_keywords"])
        print(f"{index:3d}. [{article['journal']}] {article['published_date']}")
        print(f"     {article['title']}")
        if tags:
            print(f"     Keywords: {tags}")
        print(f"     {article['link']}")


def _print_feeds(feeds: Sequence[FeedSource], preferences: Preferences) -> None:
    for feed in feeds:
        mark = "x" if feed["url"] in preferences.selected_feeds else " "
        print(f"[{mark}] {feed['name']}  {feed['url']}")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="oncoreader", description="Sync and filter oncology journal feeds."
    )
    parser.add_argument("--view", choices=VIEW_MODES, default=VIEW_ALL)
    parser.add_argument("--search", default="", help="Filter titles by this text.")
    parser.add_argument("--range", choices=list(DATE_RANGES), default=RANGE_ALL)
    parser.add_argument("--keywords", help="Save a new comma-separated keyword list.")
    parser.add_argument("--toggle-feed", metavar="URL", action="append", default=[])
    parser.add_argument("--toggle-all", action="store_true")
    parser.add_argument("--list-feeds", action="store_true")
    parser.add_argument(
        "--analyze", type=int, metavar="N", help="Analyze the N-th listed article."
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main execution entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    args = parse_args(argv)
    controller = build_controller()
    preferences = controller.preferences

    if args.keywords is not None:
        preferences.set_keywords(args.keywords)
    if args.toggle_all:
        preferences.toggle_all()
    for url in args.toggle_feed:
        preferences.toggle_one(url)

    if args.list_feeds:
        _print_feeds(preferences.catalog, preferences)
        return 0

    if not preferences.selected_feeds:
        logger.error("No feeds selected. Use --toggle-all to select every journal.")
        return 1

    controller.refresh(on_progress=_print_progress)
    visible = controller.visible_articles(args.view, args.search, args.range)
    _print_articles(visible)

    if args.analyze is not None:
        if not 1 <= args.analyze <= len(visible):
            logger.error("No article number %d in the list.", args.analyze)
            return 1
        try:
            print(controller.analyze(visible[args.analyze - 1]["id"]))
        except SummarizationError as e:
            print(f"AI error: {e}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
