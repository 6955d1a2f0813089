"""
Services package - Business logic layer.

This package exposes business services while avoiding heavy imports at module load time.
"""

from importlib import import_module
from typing import Any

__all__ = [
    "CommerceGateway",
    "DeckEntry",
    "DeckStore",
    "FeatureFlags",
    "Product",
    "PurchaseOutcome",
    "PurchaseResult",
    "PurchaseService",
    "SearchResults",
    "SearchService",
    "SettingsStore",
    "StoreService",
    "get_search_service",
    "get_store_service",
]

_LAZY_MODULES = {
    "DeckEntry": "services.deck_service",
    "DeckStore": "services.deck_service",
    "FeatureFlags": "services.feature_flags",
    "CommerceGateway": "services.purchase_service",
    "Product": "services.purchase_service",
    "PurchaseOutcome": "services.purchase_service",
    "PurchaseResult": "services.purchase_service",
    "PurchaseService": "services.purchase_service",
    "SearchResults": "services.search_service",
    "SearchService": "services.search_service",
    "get_search_service": "services.search_service",
    "SettingsStore": "services.store_service",
    "StoreService": "services.store_service",
    "get_store_service": "services.store_service",
}


def __getattr__(name: str) -> Any:
    if name in _LAZY_MODULES:
        module = import_module(_LAZY_MODULES[name])
        value = getattr(module, name)
        globals()[name] = value
        return value

    raise AttributeError(f"module 'services' has no attribute '{name}'")
