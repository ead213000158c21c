"""
Relay client.

Feeds are never requested directly: each request goes to a CORS relay that
fetches the feed on our behalf and returns the upstream document verbatim.
"""

import logging
from typing import Any, Dict
from urllib.parse import urlencode

import requests

from oncoreader.exceptions import FeedFetchError
from oncoreader.models import FeedSource

logger = logging.getLogger(__name__)


class RelayClient:
    """Retrieves raw feed documents through a passthrough relay."""

    def __init__(
        self,
        relay_url: str,
        relay_param: str = "url",
        timeout: float = 10,
        user_agent: str = "OncoReaderBot/1.0",
    ):
        self.relay_url = relay_url
        self.relay_param = relay_param
        self.timeout = timeout
        self.user_agent = user_agent

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RelayClient":
        """Builds a client from the loaded configuration."""
        return cls(
            relay_url=config["relay_url"],
            relay_param=config.get("relay_param", "url"),
            timeout=config.get("timeout_seconds", 10),
            user_agent=config.get("user_agent", "OncoReaderBot/1.0"),
        )

    def build_url(self, feed_url: str) -> str:
        """Embeds the URL-encoded feed address as a relay query parameter."""
        separator = "&" if "?" in self.relay_url else "?"
        return f"{self.relay_url}{separator}{urlencode({self.relay_param: feed_url})}"

    def fetch(self, feed: FeedSource) -> bytes:
        """Fetches one feed document, raising FeedFetchError on any failure."""
        relay_url = self.build_url(feed["url"])
        logger.debug("Requesting %s via %s", feed["name"], relay_url)
        try:
            resp = requests.get(
                relay_url, timeout=self.timeout, headers={"User-Agent": self.user_agent}
            )
            resp.raise_for_status()
        except requests.RequestException as req_err:
            raise FeedFetchError(
                f"Network error fetching {feed['name']}: {req_err}"
            ) from req_err
        return resp.content
