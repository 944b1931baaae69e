"""
Narrative analysis client (Gemini generateContent API)
Explains the latest link event in plain language.

The client never raises: a missing key, a network failure or an odd response
all resolve to a readable fallback string, so callers can show the result
as-is and the session keeps running regardless.
"""
import logging
from typing import Optional

import requests

import config
from controller.session_state import LastEvent

logger = logging.getLogger(__name__)

NO_EVENT_MESSAGE = "No event to analyse yet. Run the link first."
MISSING_KEY_MESSAGE = (
    "Gemini API key not configured. Please set GEMINI_API_KEY in your environment."
)
REQUEST_FAILED_MESSAGE = (
    "Error calling Gemini API. Please check your connection and API key."
)
EMPTY_RESPONSE_MESSAGE = "Could not get analysis from Gemini."


def build_prompt(last_event: LastEvent) -> str:
    """Prompt sent for *last_event*."""
    return (
        "As a quantum security expert, briefly explain the last event in a "
        "vehicle-to-vehicle QKD simulation.\n"
        f"Event Type: {last_event.type.value}\n"
        f"Details: {last_event.details}\n"
        "Explain its significance for establishing a secure key. "
        "If an eavesdropper was detected, explain how."
    )


class NarrativeClient:
    """Client for the summarisation model"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = config.GEMINI_API_KEY if api_key is None else api_key
        self.api_url = api_url or config.GEMINI_API_URL
        self.timeout = config.GEMINI_TIMEOUT if timeout is None else timeout
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def explain(self, last_event: Optional[LastEvent]) -> str:
        """
        Ask the model to explain *last_event*.

        Args:
            last_event: Latest event of the session, or None

        Returns:
            The model's text, or a fallback message
        """
        if last_event is None:
            return NO_EVENT_MESSAGE
        return self.complete(build_prompt(last_event))

    def complete(self, prompt: str) -> str:
        """Send a raw prompt; returns text or a fallback message."""
        if not self.configured:
            logger.warning("Narrative analysis requested without GEMINI_API_KEY")
            return MISSING_KEY_MESSAGE

        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": prompt}]},
            ]
        }

        try:
            response = self.session.post(
                self.api_url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.exception(f"Error calling Gemini API: {str(e)}")
            return REQUEST_FAILED_MESSAGE

        text = _first_candidate_text(result)
        if not text:
            logger.warning("Gemini response carried no candidate text")
            return EMPTY_RESPONSE_MESSAGE
        return text


def _first_candidate_text(result) -> Optional[str]:
    try:
        return result["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
