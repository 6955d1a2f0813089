"""
App Controller - Application logic for the deck builder screen.

This controller owns the deck and the search results. Background work reports
back through a QueueDispatcher, and every mutation of controller state happens
on the thread that drains it via process_events().
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from services.deck_service import DeckStore
from services.purchase_service import PurchaseService
from services.search_service import SearchResults, SearchService
from utils.background_worker import BackgroundWorker
from utils.cards import CardRecord
from utils.constants import DECK_EXPORT_FILE
from utils.dispatch import Dispatcher, QueueDispatcher
from utils.errors import SearchError, SearchErrorKind


class AppController:
    """Single owner of the deck, search results and purchase state."""

    def __init__(
        self,
        search_service: SearchService | None = None,
        deck: DeckStore | None = None,
        purchase_service: PurchaseService | None = None,
        dispatcher: Dispatcher | None = None,
    ):
        if search_service is None:
            search_service = SearchService(worker=BackgroundWorker(dispatcher or QueueDispatcher()))
        self.search_service = search_service
        self.dispatcher = search_service.worker.dispatcher
        self.deck = deck or DeckStore()
        self.purchase_service = purchase_service

        # Search state
        self.search_results: list[CardRecord] = []
        self.searching = False
        self.last_search_error: Exception | None = None
        self._search_generation = 0
        self._results_generation = 0

    # ============= Events =============
    def process_events(self, timeout: float | None = None) -> int:
        """Run callbacks queued by background work on the calling thread."""
        if isinstance(self.dispatcher, QueueDispatcher):
            return self.dispatcher.process_pending(timeout)
        return 0

    # ============= Search =============
    def start_search(
        self,
        query: str,
        display_width: float,
        on_finished: Callable[[SearchResults], None] | None = None,
        on_failed: Callable[[Exception], None] | None = None,
    ) -> None:
        """
        Start a card search, superseding any search in flight.

        Results from the previous search stay visible until the first record of
        this one arrives; a failed search leaves them untouched.
        """
        self._search_generation += 1
        generation = self._search_generation
        self.searching = True
        self.last_search_error = None

        def handle_record(record: CardRecord) -> None:
            if self._results_generation != generation:
                self.search_results = []
                self._results_generation = generation
            self.search_results.append(record)

        def handle_success(results: SearchResults) -> None:
            if self._results_generation != generation:
                self.search_results = []
                self._results_generation = generation
            if self._search_generation == generation:
                self.searching = False
            if on_finished:
                on_finished(results)

        def handle_error(exc: Exception) -> None:
            if isinstance(exc, SearchError) and exc.kind is SearchErrorKind.CANCELLED:
                logger.debug(f"Search for {query!r} superseded")
                return
            logger.warning(f"Search for {query!r} failed: {exc}")
            self.last_search_error = exc
            if self._search_generation == generation:
                self.searching = False
            if on_failed:
                on_failed(exc)

        self.search_service.search_async(
            query,
            display_width,
            on_success=handle_success,
            on_error=handle_error,
            on_result=handle_record,
        )

    def cancel_search(self) -> None:
        self.search_service.cancel()
        self.searching = False

    def wait_for_search(self, timeout: float = 60.0) -> bool:
        """Pump events until the current search finishes. Returns False on timeout."""
        deadline = time.monotonic() + timeout
        while self.searching:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return False
            self.process_events(timeout=min(0.1, remaining))
        self.process_events()
        return True

    # ============= Deck =============
    def select_card(self, result_index: int) -> CardRecord:
        """Add the search result at ``result_index`` to the deck."""
        record = self.search_results[result_index]
        self.deck.add_card(record)
        return record

    def change_card_count(self, index: int, delta: int) -> None:
        self.deck.change_card_count(index, delta)

    def deck_json(self) -> str:
        return self.deck.json_output()

    def export_deck(self, path: Path | None = None) -> Path:
        return self.deck.export_to_file(path or DECK_EXPORT_FILE)

    # ============= Purchases =============
    @property
    def show_ads(self) -> bool:
        if self.purchase_service is None:
            return True
        return not self.purchase_service.flags.ads_removed

    @property
    def leaks_unlocked(self) -> bool:
        if self.purchase_service is None:
            return False
        return self.purchase_service.flags.leaks_unlocked

    # ============= Lifecycle =============
    def start(self) -> None:
        if self.purchase_service is not None:
            self.purchase_service.start()

    def shutdown(self) -> None:
        self.search_service.cancel()
        self.search_service.worker.shutdown()
        if self.purchase_service is not None:
            self.purchase_service.stop()


_controller_instance: AppController | None = None


def get_app_controller() -> AppController:
    global _controller_instance
    if _controller_instance is None:
        _controller_instance = AppController()
    return _controller_instance


def reset_app_controller() -> None:
    global _controller_instance
    _controller_instance = None


__all__ = ["AppController", "get_app_controller", "reset_app_controller"]
