"""
LLM Service Module.

This module provides the LLMService class, which interfaces with the Google Gemini API
to write a short clinical analysis of a single journal article.
"""

import logging
from typing import Optional

from google import genai

from oncoreader.exceptions import SummarizationError

logger = logging.getLogger(__name__)


class LLMService:
    """
    Service for interacting with the Google Gemini API.

    Errors are raised as SummarizationError so the caller can report them;
    the service never touches article state.
    """

    def __init__(self, api_key: Optional[str], model: str = "gemini-2.0-flash"):
        self.model = model
        self.client: Optional[genai.Client] = None
        if not api_key:
            logger.warning("GEMINI_KEY not set. AI analysis disabled.")
            return
        try:
            self.client = genai.Client(api_key=api_key)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Failed to initialize Gemini client: %s", e)
            self.client = None

    _PROMPT = """
        You are a medical oncologist. Summarize the following journal article abstract.

        Title: {title}
        Abstract: {summary}

        Format:
        1. Key summary (5 lines)
        2. Clinical significance
        3. Recommended audience
        """

    def _get_prompt(self, title: str, summary: str) -> str:
        """Returns the prompt for one article."""
        return self._PROMPT.format(title=title, summary=summary)

    def summarize(self, title: str, summary: str) -> str:
        """Asks Gemini for an analysis of one article."""
        if not self.client:
            raise SummarizationError("Gemini API key is not configured.")

        logger.info("Asking Gemini to analyze %r...", title)
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=self._get_prompt(title, summary),
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise SummarizationError(f"Gemini API error: {e}") from e

        text = response.text if response.text else ""
        if not text.strip():
            raise SummarizationError("Gemini returned an empty analysis.")
        return text.strip()
