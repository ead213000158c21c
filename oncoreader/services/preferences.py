"""
Preference persistence.

Reader preferences are two string entries: the raw comma-separated keyword
string and the selected feed URLs serialized as a JSON array. Storage is a
small key-value port with JSON-file, Firestore and in-memory backends; the
Preferences object owns the live state and writes through on every change.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Protocol, Sequence, Set

from google.cloud import firestore  # type: ignore

from oncoreader.exceptions import PreferenceStoreError
from oncoreader.models import FeedSource

logger = logging.getLogger(__name__)

KEYWORDS_KEY = "keywords"
SELECTED_FEEDS_KEY = "selectedFeeds"


class PreferenceStore(Protocol):
    """Key-value storage for raw preference strings."""

    def get(self, key: str) -> Optional[str]:
        """Returns the stored value, or None when the key was never saved."""

    def set(self, key: str, value: str) -> None:
        """Stores a value under a key."""


class MemoryPreferenceStore:
    """Keeps preferences for the current session only."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFilePreferenceStore:
    """Stores preferences as a single JSON object on disk."""

    def __init__(self, path: str):
        self.path = os.path.expanduser(path)

    def _read(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            raise PreferenceStoreError(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PreferenceStoreError(f"Unexpected preferences format in {self.path}")
        return data

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except PreferenceStoreError as e:
            logger.warning("%s. Replacing it with fresh preferences.", e)
            data = {}
        data[key] = value
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise PreferenceStoreError(f"Cannot write {self.path}: {e}") from e


class FirestorePreferenceStore:
    """Stores preferences in one Google Firestore document."""

    def __init__(
        self,
        project_id: str,
        collection: str = "reader_preferences",
        document: str = "default",
    ):
        try:
            self.db = firestore.Client(project=project_id)
            self.doc_ref = self.db.collection(collection).document(document)
            logger.info("Connected to Firestore for preferences.")
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise PreferenceStoreError(f"Firestore connection failed: {e}") from e

    def get(self, key: str) -> Optional[str]:
        try:
            snap = self.doc_ref.get()
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise PreferenceStoreError(f"Firestore read failed: {e}") from e
        if not snap.exists:
            return None
        value = (snap.to_dict() or {}).get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            self.doc_ref.set({key: value}, merge=True)
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise PreferenceStoreError(f"Firestore write failed: {e}") from e


def build_preference_store(
    config: Dict[str, Any], project_id: Optional[str]
) -> PreferenceStore:
    """Uses Firestore when a GCP project is configured, else a local JSON file."""
    if project_id:
        try:
            return FirestorePreferenceStore(project_id)
        except PreferenceStoreError as e:
            logger.warning("%s. Falling back to local preferences file.", e)
    return JsonFilePreferenceStore(config["preferences_file"])


class Preferences:
    """
    Keyword string and feed selection, persisted on every change.

    Storage failures are logged and the state carries on in memory, so a
    broken store never blocks filtering.
    """

    def __init__(
        self,
        store: PreferenceStore,
        catalog: Sequence[FeedSource],
        default_keywords: str = "",
    ):
        self.store = store
        self.catalog = list(catalog)
        self.keywords = default_keywords
        self.selected_feeds: Set[str] = {feed["url"] for feed in self.catalog}
        self.load()

    def load(self) -> None:
        """Replaces the in-memory state with whatever the store holds."""
        try:
            saved_keywords = self.store.get(KEYWORDS_KEY)
            saved_feeds = self.store.get(SELECTED_FEEDS_KEY)
        except PreferenceStoreError as e:
            logger.warning("Loading preferences failed (%s). Using defaults.", e)
            return

        if saved_keywords is not None:
            self.keywords = saved_keywords
        if saved_feeds is not None:
            try:
                urls = json.loads(saved_feeds)
            except ValueError:
                logger.warning("Ignoring malformed saved feed selection.")
                return
            if isinstance(urls, list):
                self.selected_feeds = {u for u in urls if isinstance(u, str)}

    def _save(self, key: str, value: str) -> None:
        try:
            self.store.set(key, value)
        except PreferenceStoreError as e:
            logger.warning("Saving %s failed (%s). Keeping it for this session.", key, e)

    def _save_selection(self) -> None:
        # Stored in catalog order, unknown URLs last.
        ordered = [f["url"] for f in self.catalog if f["url"] in self.selected_feeds]
        extra = sorted(self.selected_feeds.difference(ordered))
        self._save(SELECTED_FEEDS_KEY, json.dumps(ordered + extra))

    def set_keywords(self, raw: str) -> None:
        """Replaces the raw keyword string."""
        self.keywords = raw
        self._save(KEYWORDS_KEY, raw)

    def toggle_one(self, url: str) -> None:
        """Selects the feed if it is unselected, and vice versa."""
        if url in self.selected_feeds:
            self.selected_feeds.discard(url)
        else:
            self.selected_feeds.add(url)
        self._save_selection()

    def all_selected(self) -> bool:
        """True when every catalog feed is selected."""
        return all(feed["url"] in self.selected_feeds for feed in self.catalog)

    def toggle_all(self) -> None:
        """Clears the selection when every feed is selected, else selects all."""
        if self.all_selected():
            self.selected_feeds = set()
        else:
            self.selected_feeds = {feed["url"] for feed in self.catalog}
        self._save_selection()

    def selected_sources(self) -> List[FeedSource]:
        """The selected feeds, in catalog order."""
        return [feed for feed in self.catalog if feed["url"] in self.selected_feeds]
