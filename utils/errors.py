"""Exception types shared by the deck, search and purchase services."""

from __future__ import annotations

from enum import Enum


class SearchErrorKind(Enum):
    NO_QUERY = "no_query"
    METADATA_REQUEST_FAILED = "metadata_request_failed"
    CANCELLED = "cancelled"


_SEARCH_MESSAGES = {
    SearchErrorKind.NO_QUERY: "Enter a card name to search.",
    SearchErrorKind.METADATA_REQUEST_FAILED: "Unable to reach the card database.",
    SearchErrorKind.CANCELLED: "Search was cancelled.",
}


class SearchError(RuntimeError):
    """A card search failed as a whole. No partial results accompany it."""

    def __init__(self, kind: SearchErrorKind, detail: str | None = None) -> None:
        message = _SEARCH_MESSAGES[kind]
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.kind = kind
        self.detail = detail


class ImageFetchError(RuntimeError):
    """A single search candidate could not be turned into a card record."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch card image {url}: {reason}")
        self.url = url
        self.reason = reason


class CommerceErrorKind(Enum):
    NO_PRODUCT_IDENTIFIERS = "no_product_identifiers"
    NO_PRODUCTS_FOUND = "no_products_found"
    REQUEST_FAILED = "request_failed"
    PURCHASE_CANCELLED = "purchase_cancelled"
    PURCHASE_FAILED = "purchase_failed"


_COMMERCE_MESSAGES = {
    CommerceErrorKind.NO_PRODUCT_IDENTIFIERS: "No In-App Purchase product identifiers were found.",
    CommerceErrorKind.NO_PRODUCTS_FOUND: "No In-App Purchases were found.",
    CommerceErrorKind.REQUEST_FAILED: (
        "Unable to fetch available In-App Purchase products at the moment."
    ),
    CommerceErrorKind.PURCHASE_CANCELLED: "In-App Purchase process was cancelled.",
    CommerceErrorKind.PURCHASE_FAILED: "In-App Purchase failed.",
}


class CommerceError(RuntimeError):
    """Product listing or purchase did not complete."""

    def __init__(self, kind: CommerceErrorKind, reason: str | None = None) -> None:
        message = _COMMERCE_MESSAGES[kind]
        if reason:
            message = f"{message} {reason}"
        super().__init__(message)
        self.kind = kind
        self.reason = reason


class DeckIndexError(IndexError):
    """A deck position does not reference an existing entry."""

    def __init__(self, index: int, size: int) -> None:
        super().__init__(f"Deck index {index} out of range for {size} entries")
        self.index = index
        self.size = size


class SerializationError(ValueError):
    """Deck content could not be encoded as JSON."""


__all__ = [
    "CommerceError",
    "CommerceErrorKind",
    "DeckIndexError",
    "ImageFetchError",
    "SearchError",
    "SearchErrorKind",
    "SerializationError",
]
