"""Feature flags unlocked by in-app purchases."""

from __future__ import annotations

import threading

from loguru import logger

from services.store_service import SettingsStore
from utils.constants import ADS_REMOVED_KEY, LEAKS_MODE_KEY


class FeatureFlags:
    """Purchase-unlocked flags. Flags are only ever set, never cleared."""

    def __init__(self, settings: SettingsStore | None = None) -> None:
        self.settings = settings or SettingsStore()
        self._lock = threading.Lock()

    @property
    def ads_removed(self) -> bool:
        return self.settings.get_bool(ADS_REMOVED_KEY)

    @property
    def leaks_unlocked(self) -> bool:
        return self.settings.get_bool(LEAKS_MODE_KEY)

    def unlock(self, key: str) -> bool:
        """
        Set a flag to true if it is not set already.

        Returns:
            True when this call changed the flag
        """
        with self._lock:
            if self.settings.get_bool(key):
                logger.debug(f"Feature flag {key} already set")
                return False
            self.settings.set_bool(key, True)
        logger.info(f"Feature flag {key} unlocked")
        return True


__all__ = ["FeatureFlags"]
