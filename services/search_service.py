"""
Search Service - Business logic for card search.

This module resolves a free-text query into display-ready card records:
- Metadata lookup against the card database
- Candidate selection (id plus image addressing required)
- Concurrent image fetch, decode and thumbnail resize per candidate
- Per-candidate failure isolation and search cancellation
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any

from loguru import logger

from repositories.card_repository import CardRepository, get_card_repository
from utils.background_worker import BackgroundWorker
from utils.cards import CardRecord
from utils.constants import MAX_IMAGE_WORKERS, THUMBNAIL_COLUMNS
from utils.errors import ImageFetchError, SearchError, SearchErrorKind
from utils.thumbnails import render_thumbnail, thumbnail_size

RecordCallback = Callable[[CardRecord], None]


@dataclass(frozen=True)
class SearchCandidate:
    """A raw card entry that has everything needed to fetch its image."""

    position: int
    card_id: str
    image_url: str
    content: dict[str, Any]


class SearchResults:
    """Records resolved by one search, in arrival order.

    Arrival order depends on which image fetch finishes first. Use
    in_response_order() when the metadata response order matters.
    """

    def __init__(self, query: str, size: tuple[int, int], candidate_count: int = 0) -> None:
        self.query = query
        self.thumbnail_size = size
        self.candidate_count = candidate_count
        self.dropped = 0
        self._items: list[tuple[int, CardRecord]] = []
        self._lock = threading.Lock()

    def append(self, position: int, record: CardRecord) -> None:
        with self._lock:
            self._items.append((position, record))

    def mark_dropped(self) -> None:
        with self._lock:
            self.dropped += 1

    def records(self) -> list[CardRecord]:
        with self._lock:
            return [record for _, record in self._items]

    def in_response_order(self) -> list[CardRecord]:
        with self._lock:
            return [record for _, record in sorted(self._items, key=lambda item: item[0])]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __iter__(self) -> Iterator[CardRecord]:
        return iter(self.records())


class SearchService:
    """Service for card search and thumbnail resolution."""

    def __init__(
        self,
        card_repository: CardRepository | None = None,
        worker: BackgroundWorker | None = None,
        max_workers: int = MAX_IMAGE_WORKERS,
        columns: int = THUMBNAIL_COLUMNS,
    ):
        """
        Initialize the search service.

        Args:
            card_repository: CardRepository instance
            worker: BackgroundWorker used by search_async
            max_workers: Maximum concurrent image fetches per search
            columns: Grid columns the display width is divided into
        """
        self.card_repo = card_repository or get_card_repository()
        self.worker = worker or BackgroundWorker()
        self.max_workers = max_workers
        self.columns = columns
        self._generation = 0
        self._generation_lock = threading.Lock()

    # ============= Search Lifecycle =============

    def cancel(self) -> None:
        """Invalidate every search started so far."""
        with self._generation_lock:
            self._generation += 1
        logger.debug("Cancelled in-flight card searches")

    def _begin(self) -> int:
        with self._generation_lock:
            self._generation += 1
            return self._generation

    def _is_current(self, generation: int) -> bool:
        with self._generation_lock:
            return generation == self._generation

    def _ensure_current(self, generation: int) -> None:
        if not self._is_current(generation):
            raise SearchError(SearchErrorKind.CANCELLED)

    # ============= Search =============

    def search(
        self,
        query: str,
        display_width: float,
        on_result: RecordCallback | None = None,
    ) -> SearchResults:
        """
        Search for cards by name and resolve their thumbnails.

        Starting a search cancels any search already running on this service.

        Args:
            query: Free-text card name
            display_width: Width available to the results grid
            on_result: Called with each record as soon as it is resolved

        Returns:
            SearchResults holding every candidate whose image resolved

        Raises:
            SearchError: NO_QUERY for a blank query, METADATA_REQUEST_FAILED when the
                metadata lookup fails, CANCELLED when superseded before completion
        """
        return self._run_search(self._begin(), query, display_width, on_result)

    def search_async(
        self,
        query: str,
        display_width: float,
        on_success: Callable[[SearchResults], None],
        on_error: Callable[[Exception], None],
        on_result: RecordCallback | None = None,
    ) -> int:
        """
        Run search() on the background worker.

        All callbacks are delivered through the worker's dispatcher. on_result is not
        called for records that arrive after the search was cancelled.

        Returns:
            The search generation number
        """
        generation = self._begin()
        dispatcher = self.worker.dispatcher

        def deliver(record: CardRecord) -> None:
            if self._is_current(generation):
                on_result(record)

        def forward(record: CardRecord) -> None:
            dispatcher.call_after(deliver, record)

        def finished(results: SearchResults) -> None:
            if not self._is_current(generation):
                on_error(SearchError(SearchErrorKind.CANCELLED))
                return
            on_success(results)

        self.worker.submit(
            self._run_search,
            generation,
            query,
            display_width,
            forward if on_result else None,
            on_success=finished,
            on_error=on_error,
        )
        return generation

    def _run_search(
        self,
        generation: int,
        query: str,
        display_width: float,
        on_result: RecordCallback | None,
    ) -> SearchResults:
        query = (query or "").strip()
        if not query:
            raise SearchError(SearchErrorKind.NO_QUERY)

        size = thumbnail_size(display_width, self.columns)

        try:
            raw_cards = self.card_repo.fetch_cards(query)
        except Exception as exc:
            logger.error(f"Card metadata request for {query!r} failed: {exc}")
            raise SearchError(SearchErrorKind.METADATA_REQUEST_FAILED, str(exc)) from exc
        self._ensure_current(generation)

        candidates = self.collect_candidates(raw_cards)
        results = SearchResults(query, size, candidate_count=len(candidates))
        if candidates:
            self._resolve_all(generation, candidates, size, results, on_result)
        self._ensure_current(generation)

        logger.info(
            f"Search {query!r}: {len(results)} of {len(raw_cards)} cards resolved "
            f"({results.dropped} image fetches failed)"
        )
        return results

    def _resolve_all(
        self,
        generation: int,
        candidates: list[SearchCandidate],
        size: tuple[int, int],
        results: SearchResults,
        on_result: RecordCallback | None,
    ) -> None:
        workers = max(1, min(self.max_workers, len(candidates)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {
                pool.submit(self.resolve_candidate, candidate, size): candidate
                for candidate in candidates
            }
            for future in as_completed(futures):
                if not self._is_current(generation):
                    for pending in futures:
                        pending.cancel()
                    break

                candidate = futures[future]
                try:
                    record = future.result()
                except ImageFetchError as exc:
                    logger.debug(f"Dropping search candidate {candidate.card_id}: {exc}")
                    results.mark_dropped()
                    continue

                results.append(candidate.position, record)
                if on_result:
                    on_result(record)

    # ============= Candidate Resolution =============

    def collect_candidates(self, raw_cards: list[dict[str, Any]]) -> list[SearchCandidate]:
        """
        Select the raw entries that carry an id and enough addressing for an image URL.

        Entries missing either are skipped.
        """
        candidates: list[SearchCandidate] = []
        for position, card in enumerate(raw_cards):
            card_id = card.get("id")
            if not isinstance(card_id, str) or not card_id:
                logger.debug(f"Skipping card without id at position {position}")
                continue
            image_url = self.card_repo.build_image_url(card)
            if image_url is None:
                logger.debug(f"Skipping card {card_id}: missing setCode or number")
                continue
            candidates.append(
                SearchCandidate(
                    position=position,
                    card_id=card_id,
                    image_url=image_url,
                    content=card,
                )
            )
        return candidates

    def resolve_candidate(self, candidate: SearchCandidate, size: tuple[int, int]) -> CardRecord:
        """
        Fetch and resize a candidate's image.

        Raises:
            ImageFetchError: If the download or decode fails
        """
        try:
            data = self.card_repo.fetch_image(candidate.image_url)
        except Exception as exc:
            raise ImageFetchError(candidate.image_url, str(exc)) from exc

        try:
            thumbnail = render_thumbnail(data, size)
        except Exception as exc:
            raise ImageFetchError(candidate.image_url, str(exc)) from exc

        return CardRecord(id=candidate.card_id, content=candidate.content, thumbnail=thumbnail)


_default_service = None


def get_search_service() -> SearchService:
    """Get the default search service instance."""
    global _default_service
    if _default_service is None:
        _default_service = SearchService()
    return _default_service


def reset_search_service() -> None:
    """Reset the global search service instance (test isolation)."""
    global _default_service
    _default_service = None


__all__ = [
    "SearchCandidate",
    "SearchResults",
    "SearchService",
    "get_search_service",
    "reset_search_service",
]
