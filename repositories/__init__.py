"""
Repositories package - Data access layer.

This package contains repository classes that handle all remote data retrieval,
isolating the services from network details.
"""

from repositories.card_repository import (
    CardRepository,
    get_card_repository,
    reset_card_repository,
)

__all__ = [
    "CardRepository",
    "get_card_repository",
    "reset_card_repository",
]
