"""
Card Repository - Data access layer for the remote card database.

This module handles all network access for card search:
- Card metadata lookup by name
- Image URL construction from card addressing fields
- Raw image byte fetching
"""

from typing import Any

from curl_cffi import requests
from loguru import logger

from utils.constants import CARD_API_BASE_URL, CARD_IMAGE_BASE_URL, REQUEST_TIMEOUT


class CardRepository:
    """Repository for card metadata and image downloads."""

    def __init__(
        self,
        api_base_url: str = CARD_API_BASE_URL,
        image_base_url: str = CARD_IMAGE_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
    ):
        """
        Initialize the card repository.

        Args:
            api_base_url: Base URL of the card metadata API (with trailing slash)
            image_base_url: Base URL of the card image CDN (with trailing slash)
            timeout: Per-request timeout in seconds
        """
        self.api_base_url = api_base_url
        self.image_base_url = image_base_url
        self.timeout = timeout

    # ============= Card Metadata Operations =============

    def fetch_cards(self, query: str) -> list[dict[str, Any]]:
        """
        Query the card database for cards matching a name.

        Args:
            query: Free-text card name

        Returns:
            Raw card entries from the response's "cards" array (non-object entries dropped)

        Raises:
            Exception: Transport failures, HTTP errors and malformed bodies propagate
        """
        url = f"{self.api_base_url}cards"
        logger.debug(f"Fetching card metadata for {query!r}")
        response = requests.get(
            url,
            params={"name": query},
            impersonate="chrome",
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError(f"Unexpected card metadata payload type: {type(payload).__name__}")

        cards = payload.get("cards")
        if not isinstance(cards, list):
            return []
        return [card for card in cards if isinstance(card, dict)]

    # ============= Card Image Operations =============

    def build_image_url(self, card: dict[str, Any]) -> str | None:
        """
        Build the image URL for a raw card entry.

        Returns:
            URL string, or None when setCode or number is missing
        """
        set_code = card.get("setCode")
        number = card.get("number")
        if not isinstance(set_code, str) or not isinstance(number, str):
            return None
        if not set_code or not number:
            return None
        return f"{self.image_base_url}{set_code}/{number}.png"

    def fetch_image(self, url: str) -> bytes:
        """
        Download raw image bytes.

        Raises:
            Exception: Transport failures and HTTP errors propagate
        """
        response = requests.get(url, impersonate="chrome", timeout=self.timeout)
        response.raise_for_status()
        return response.content


# Shared instance
_default_repository = None


def get_card_repository() -> CardRepository:
    """Get the default card repository instance."""
    global _default_repository
    if _default_repository is None:
        _default_repository = CardRepository()
    return _default_repository


def reset_card_repository() -> None:
    """
    Reset the global card repository instance.

    This is primarily useful for testing to ensure test isolation
    and prevent state leakage between tests.
    """
    global _default_repository
    _default_repository = None
