"""
Purchase Service - In-app purchase handling.

The platform commerce API is an injected CommerceGateway. This module only:
- Loads the bundled product identifiers
- Requests products and initiates purchases through the gateway
- Unlocks feature flags when a recognized product is purchased
"""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from loguru import logger

from services.feature_flags import FeatureFlags
from utils.constants import (
    ADS_REMOVED_KEY,
    IAP_PRODUCT_IDS_FILE,
    LEAKS_MODE_KEY,
    LEAKS_PACKAGE_PRODUCT_ID,
    REMOVE_ADS_PRODUCT_ID,
)
from utils.errors import CommerceError, CommerceErrorKind
from utils.result import Result

PRODUCT_FLAGS = {
    REMOVE_ADS_PRODUCT_ID: ADS_REMOVED_KEY,
    LEAKS_PACKAGE_PRODUCT_ID: LEAKS_MODE_KEY,
}


@dataclass(frozen=True)
class Product:
    """A purchasable product as listed by the store."""

    identifier: str
    title: str = ""
    price: str = ""


class PurchaseOutcome(Enum):
    PURCHASED = "purchased"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class PurchaseResult:
    product_id: str
    outcome: PurchaseOutcome
    reason: str | None = None


ProductsHandler = Callable[[Result[list[Product], CommerceError]], None]
PurchaseHandler = Callable[[Result[bool, CommerceError]], None]


class CommerceGateway(Protocol):
    """The platform commerce API, as far as the app needs it.

    Handlers are single-shot per request, though a gateway may report the same
    purchase confirmation more than once.
    """

    def list_products(
        self,
        product_ids: list[str],
        handler: Callable[[Result[list[Product], CommerceError]], None],
    ) -> None: ...

    def purchase(self, product_id: str, handler: Callable[[PurchaseResult], None]) -> None: ...

    def can_make_payments(self) -> bool: ...

    def restore_purchases(self) -> None: ...

    def start_observing(self) -> None: ...

    def stop_observing(self) -> None: ...


def load_product_ids(path: Path = IAP_PRODUCT_IDS_FILE) -> list[str] | None:
    """
    Read the bundled product identifier list.

    Returns:
        Identifiers in file order, or None if the file is missing or malformed
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning(f"Product identifier list not found at {path}")
        return None
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning(f"Failed to read product identifiers from {path}: {exc}")
        return None

    if not isinstance(data, list):
        logger.warning(f"Product identifier list at {path} is not a JSON array")
        return None
    return [item for item in data if isinstance(item, str)]


class PurchaseService:
    """Owns the purchase flow for one injected gateway."""

    def __init__(
        self,
        gateway: CommerceGateway,
        flags: FeatureFlags | None = None,
        product_ids_path: Path = IAP_PRODUCT_IDS_FILE,
    ) -> None:
        self.gateway = gateway
        self.flags = flags or FeatureFlags()
        self.product_ids_path = product_ids_path
        self.products: list[Product] = []
        self._observing = False

    # ============= Lifecycle =============

    def start(self) -> None:
        if not self._observing:
            self.gateway.start_observing()
            self._observing = True

    def stop(self) -> None:
        if self._observing:
            self.gateway.stop_observing()
            self._observing = False

    @property
    def is_observing(self) -> bool:
        return self._observing

    # ============= Products =============

    def load_products(self, handler: ProductsHandler) -> None:
        """Request the bundled products from the gateway and report through ``handler``."""
        product_ids = load_product_ids(self.product_ids_path)
        if product_ids is None:
            error = CommerceError(CommerceErrorKind.NO_PRODUCT_IDENTIFIERS)
            logger.warning(str(error))
            handler(Result.failure(error))
            return

        def on_products(result: Result[list[Product], CommerceError]) -> None:
            if result.is_error:
                logger.warning(f"Product request failed: {result.error}")
            else:
                self.products = list(result.value or [])
                logger.info(f"Loaded {len(self.products)} in-app products")
            handler(result)

        self.gateway.list_products(product_ids, on_products)

    # ============= Purchases =============

    def buy(self, product_id: str, handler: PurchaseHandler | None = None) -> bool:
        """
        Start a purchase.

        Returns:
            False if the device cannot make payments (the gateway is not called)
        """
        if not self.gateway.can_make_payments():
            logger.warning(f"Payments are disabled; not purchasing {product_id}")
            return False

        def on_result(result: PurchaseResult) -> None:
            outcome = self.handle_purchase_result(result)
            if handler:
                handler(outcome)

        self.gateway.purchase(product_id, on_result)
        return True

    def handle_purchase_result(self, result: PurchaseResult) -> Result[bool, CommerceError]:
        """Apply a purchase outcome. Repeated confirmations leave the flags unchanged."""
        if result.outcome is PurchaseOutcome.PURCHASED:
            flag = PRODUCT_FLAGS.get(result.product_id)
            if flag is None:
                logger.info(f"Purchased unrecognized product {result.product_id}")
            else:
                self.flags.unlock(flag)
            return Result.success(True)

        if result.outcome is PurchaseOutcome.CANCELLED:
            error = CommerceError(CommerceErrorKind.PURCHASE_CANCELLED)
            logger.info(f"Purchase of {result.product_id} cancelled")
        else:
            error = CommerceError(CommerceErrorKind.PURCHASE_FAILED, result.reason)
            logger.warning(f"Purchase of {result.product_id} failed: {result.reason}")
        return Result.failure(error)

    def restore_purchases(self) -> None:
        self.gateway.restore_purchases()


__all__ = [
    "CommerceGateway",
    "PRODUCT_FLAGS",
    "Product",
    "PurchaseOutcome",
    "PurchaseResult",
    "PurchaseService",
    "load_product_ids",
]
