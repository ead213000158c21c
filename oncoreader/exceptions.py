"""Exceptions raised by the OncoReader core."""


class OncoReaderError(Exception):
    """Base class for all OncoReader errors."""


class FeedFetchError(OncoReaderError):
    """Raised when a feed cannot be retrieved through the relay."""


class FeedParseError(OncoReaderError):
    """Raised when a retrieved feed document cannot be parsed."""


class SummarizationError(OncoReaderError):
    """Raised when the AI analysis of an article fails."""


class PreferenceStoreError(OncoReaderError):
    """Raised when preferences cannot be read from or written to storage."""


class IngestionInProgressError(OncoReaderError):
    """Raised when a refresh is requested while another run is active."""
