"""Constants file."""

import os
import sys
from pathlib import Path

APP_NAME = "Pal Pad"


def _default_base_dir() -> Path:
    """Return the writable base directory for config/cache/logging."""
    override = os.getenv("PALPAD_HOME")
    if override:
        return Path(override)
    if getattr(sys, "frozen", False):
        local_appdata = os.getenv("LOCALAPPDATA")
        if local_appdata:
            return Path(local_appdata) / APP_NAME
        return Path.home() / ".palpad"
    return Path(__file__).resolve().parent.parent


BASE_DATA_DIR = _default_base_dir()
CONFIG_DIR = BASE_DATA_DIR / "config"
DECKS_DIR = BASE_DATA_DIR / "decks"
LOGS_DIR = BASE_DATA_DIR / "logs"


def ensure_base_dirs() -> None:
    """Ensure base config/deck/log directories exist without importing side effects."""
    BASE_DATA_DIR.mkdir(parents=True, exist_ok=True)
    for path in (CONFIG_DIR, DECKS_DIR, LOGS_DIR):
        path.mkdir(parents=True, exist_ok=True)


SETTINGS_FILE = CONFIG_DIR / "settings.json"
DECK_EXPORT_FILE = DECKS_DIR / "deck.json"

# Bundled with the services package
RESOURCES_DIR = Path(__file__).resolve().parent.parent / "services" / "resources"
IAP_PRODUCT_IDS_FILE = RESOURCES_DIR / "iap_product_ids.json"

# Card database endpoints
CARD_API_BASE_URL = "https://api.pokemontcg.io/v1/"
CARD_IMAGE_BASE_URL = "https://images.pokemontcg.io/"

REQUEST_TIMEOUT = 30  # Seconds
MAX_IMAGE_WORKERS = 8  # Concurrent image fetches per search

# Native card scan is 246x343
CARD_HEIGHT_TO_WIDTH = 343 / 246
THUMBNAIL_COLUMNS = 4

# In-app purchases
REMOVE_ADS_PRODUCT_ID = "com.jaredgrimes.palpad.removeads"
LEAKS_PACKAGE_PRODUCT_ID = "com.jaredgrimes.palpad.leakspackage"
ADS_REMOVED_KEY = "adsRemoved"
LEAKS_MODE_KEY = "leaksMode"

__all__ = [
    "APP_NAME",
    "BASE_DATA_DIR",
    "CONFIG_DIR",
    "DECKS_DIR",
    "LOGS_DIR",
    "SETTINGS_FILE",
    "DECK_EXPORT_FILE",
    "RESOURCES_DIR",
    "IAP_PRODUCT_IDS_FILE",
    "CARD_API_BASE_URL",
    "CARD_IMAGE_BASE_URL",
    "REQUEST_TIMEOUT",
    "MAX_IMAGE_WORKERS",
    "CARD_HEIGHT_TO_WIDTH",
    "THUMBNAIL_COLUMNS",
    "REMOVE_ADS_PRODUCT_ID",
    "LEAKS_PACKAGE_PRODUCT_ID",
    "ADS_REMOVED_KEY",
    "LEAKS_MODE_KEY",
    "ensure_base_dirs",
]
