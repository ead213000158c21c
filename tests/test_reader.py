"""Unit tests for the reader controller and command-line entry point."""

import json
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

from oncoreader import reader
from oncoreader.config import load_config
from oncoreader.exceptions import IngestionInProgressError, SummarizationError
from oncoreader.services.preferences import MemoryPreferenceStore, Preferences

CATALOG = [
    {"name": "Journal A", "url": "https://a.example.org/rss"},
    {"name": "Journal B", "url": "https://b.example.org/rss"},
]
NOW = datetime(2026, 10, 17, tzinfo=timezone.utc)


def rss_document(*items):
    body = "".join(
        f"<item><title>{title}</title><link>{link}</link>"
        f"<pubDate>{date}</pubDate></item>"
        for title, link, date in items
    )
    return f'<?xml version="1.0"?><rss version="2.0"><channel>{body}</channel></rss>'


RECENT = (NOW - timedelta(days=2)).strftime("%a, %d %b %Y 10:00:00 GMT")
OLD = (NOW - timedelta(days=120)).strftime("%a, %d %b %Y 10:00:00 GMT")

DOCUMENTS = {
    "https://a.example.org/rss": rss_document(
        ("EGFR trial", "https://a.example.org/1", RECENT),
        ("KRAS update", "https://a.example.org/2", OLD),
    ),
    "https://b.example.org/rss": rss_document(
        ("Radiotherapy review", "https://b.example.org/1", RECENT),
    ),
}


def make_controller(keywords="egfr, kras"):
    relay = MagicMock()
    relay.fetch.side_effect = lambda feed: DOCUMENTS[feed["url"]]
    llm = MagicMock()
    prefs = Preferences(MemoryPreferenceStore(), CATALOG, keywords)
    return reader.ReaderController(prefs, relay, llm)


class TestReaderController(unittest.TestCase):
    def test_refresh_fetches_selected_feeds(self):
        controller = make_controller()
        controller.preferences.toggle_one("https://b.example.org/rss")

        articles = controller.refresh()

        self.assertEqual([a["title"] for a in articles], ["EGFR trial", "KRAS update"])
        controller.relay.fetch.assert_called_once_with(CATALOG[0])

    def test_refresh_replaces_previous_articles(self):
        controller = make_controller()
        controller.refresh()
        self.assertEqual(len(controller.articles), 3)

        controller.preferences.toggle_one("https://a.example.org/rss")
        controller.refresh()
        self.assertEqual(
            [a["title"] for a in controller.articles], ["Radiotherapy review"]
        )

    def test_refresh_rejects_concurrent_run(self):
        controller = make_controller()
        controller._run_lock.acquire()
        try:
            self.assertTrue(controller.is_running)
            with self.assertRaises(IngestionInProgressError):
                controller.refresh()
        finally:
            controller._run_lock.release()
        self.assertFalse(controller.is_running)

    def test_visible_articles(self):
        controller = make_controller(keywords="egfr")
        controller.refresh()

        visible = controller.visible_articles("interests", None, "30d", now=NOW)
        self.assertEqual([a["title"] for a in visible], ["EGFR trial"])
        self.assertEqual(visible[0]["matched_keywords"], ["egfr"])
        # Stored articles are never annotated in place.
        self.assertEqual(controller.articles[0]["matched_keywords"], [])

    def test_keyword_change_applies_on_next_pass(self):
        controller = make_controller(keywords="egfr")
        controller.refresh()
        controller.preferences.set_keywords("radiotherapy")

        visible = controller.visible_articles("interests", now=NOW)
        self.assertEqual([a["title"] for a in visible], ["Radiotherapy review"])

    def test_analyze_keeps_result_apart_from_article(self):
        controller = make_controller()
        controller.refresh()
        controller.llm.summarize.return_value = "Analysis"
        article_id = controller.articles[0]["id"]
        before = dict(controller.articles[0])

        self.assertEqual(controller.analyze(article_id), "Analysis")
        self.assertEqual(controller.analyses, {article_id: "Analysis"})
        self.assertEqual(controller.articles[0], before)
        controller.llm.summarize.assert_called_once_with(
            "EGFR trial", before["summary"]
        )

    def test_analyze_failure_leaves_state_untouched(self):
        controller = make_controller()
        controller.refresh()
        controller.llm.summarize.side_effect = SummarizationError("quota")

        with self.assertRaises(SummarizationError):
            controller.analyze(controller.articles[0]["id"])
        self.assertEqual(controller.analyses, {})

    def test_analyze_unknown_article(self):
        controller = make_controller()
        with self.assertRaises(KeyError):
            controller.analyze("missing")

    def test_refresh_clears_analyses(self):
        controller = make_controller()
        controller.refresh()
        controller.analyses["x"] = "old"
        controller.refresh()
        self.assertEqual(controller.analyses, {})


class TestMain(unittest.TestCase):
    @patch("oncoreader.reader.build_controller")
    def test_main_lists_filtered_articles(self, mock_build):
        controller = make_controller(keywords="egfr")
        mock_build.return_value = controller

        with patch("builtins.print") as mock_print:
            exit_code = reader.main(["--view", "interests"])

        self.assertEqual(exit_code, 0)
        printed = "\n".join(str(c.args[0]) for c in mock_print.call_args_list)
        self.assertIn("Fetching Journal A...", printed)
        self.assertIn("EGFR trial", printed)
        self.assertNotIn("Radiotherapy review", printed)

    @patch("oncoreader.reader.build_controller")
    def test_main_saves_preferences(self, mock_build):
        controller = make_controller()
        mock_build.return_value = controller

        with patch("builtins.print"):
            reader.main(["--keywords", "nsclc", "--toggle-all", "--list-feeds"])

        store = controller.preferences.store
        self.assertEqual(store.get("keywords"), "nsclc")
        self.assertEqual(json.loads(store.get("selectedFeeds")), [])
        controller.relay.fetch.assert_not_called()

    @patch("oncoreader.reader.build_controller")
    def test_main_without_feeds(self, mock_build):
        controller = make_controller()
        mock_build.return_value = controller
        self.assertEqual(reader.main(["--toggle-all"]), 1)

    @patch("oncoreader.reader.build_controller")
    def test_main_reports_ai_error(self, mock_build):
        controller = make_controller()
        controller.llm.summarize.side_effect = SummarizationError("quota")
        mock_build.return_value = controller

        with patch("builtins.print"):
            self.assertEqual(reader.main(["--analyze", "1"]), 1)


class TestConfig(unittest.TestCase):
    def test_load_config_defaults(self):
        config = load_config("missing_config.json")
        self.assertEqual(config["relay_param"], "url")
        self.assertEqual(config["request_delay_seconds"], 0.2)

    @patch(
        "builtins.open",
        new_callable=unittest.mock.mock_open,
        read_data='{"relay_url": "https://relay.example.org/raw"}',
    )
    def test_load_config_overrides(self, _mock_file):
        config = load_config("dummy_config.json")
        self.assertEqual(config["relay_url"], "https://relay.example.org/raw")
        self.assertEqual(config["gemini_model"], "gemini-2.0-flash")


if __name__ == "__main__":
    unittest.main()
