"""
Base classes and interfaces for feed parsers.

This module defines the contract that all feed parsers must follow.
"""

from typing import List, Protocol, Union

from oncoreader.models import Article


class FeedParser(Protocol):
    """
    Protocol for feed parsers.

    Classes implementing this protocol turn one journal's raw feed document
    into a list of Article objects, raising FeedParseError when the document
    cannot be read at all.
    """

    def parse(self, journal: str, document: Union[str, bytes]) -> List[Article]:
        """Parses a raw feed document."""
