"""
Deck Service - Business logic for the active deck.

This module contains the deck state model:
- Increment-or-insert of card records keyed by card id
- Count changes with removal at zero
- JSON export of the deck contents
- Change notification for observers
"""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

from loguru import logger
from PIL import Image

from utils.cards import CardRecord, is_json_value
from utils.errors import DeckIndexError, SerializationError

DeckListener = Callable[["DeckStore"], None]


@dataclass
class DeckEntry:
    """A card record and how many copies of it the deck holds."""

    record: CardRecord
    count: int = 1

    @property
    def id(self) -> str:
        return self.record.id


class DeckStore:
    """Ordered set of distinct cards in the deck, with per-card counts."""

    def __init__(self) -> None:
        self._entries: list[DeckEntry] = []
        self._listeners: list[DeckListener] = []
        self._lock = threading.RLock()

    # ============= Read Access =============

    @property
    def entries(self) -> list[DeckEntry]:
        """Snapshot of the entries in insertion order."""
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        return self.unique_card_count()

    def __iter__(self) -> Iterator[DeckEntry]:
        return iter(self.entries)

    def unique_card_count(self) -> int:
        """Number of distinct cards, not the sum of counts."""
        with self._lock:
            return len(self._entries)

    def total_card_count(self) -> int:
        with self._lock:
            return sum(entry.count for entry in self._entries)

    def card_count(self, index: int) -> int:
        with self._lock:
            return self._entry_at(index).count

    def thumbnail(self, index: int) -> Image.Image | None:
        with self._lock:
            return self._entry_at(index).record.thumbnail

    def index_of(self, card_id: str) -> int | None:
        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.id == card_id:
                    return index
        return None

    # ============= Mutation =============

    def add_card(self, record: CardRecord) -> None:
        """
        Add one copy of a card.

        A card whose id is already in the deck only has its count incremented;
        the record stored first is kept and the new one is discarded.
        """
        with self._lock:
            for entry in self._entries:
                if entry.id == record.id:
                    entry.count += 1
                    logger.debug(f"Duplicate card {record.id}; count now {entry.count}")
                    break
            else:
                self._entries.append(DeckEntry(record=record))
                logger.debug(f"Added card {record.id} to deck")
        self._notify()

    def change_card_count(self, index: int, delta: int) -> None:
        """
        Add ``delta`` to the count of the entry at ``index``.

        When the resulting count is zero or less the entry is removed and every
        later entry shifts down by one, so callers must not reuse ``index``.

        Raises:
            DeckIndexError: If index does not reference an existing entry
        """
        with self._lock:
            entry = self._entry_at(index)
            entry.count += delta
            if entry.count <= 0:
                del self._entries[index]
                logger.debug(f"Removed card {entry.id} from deck")
        self._notify()

    # ============= Export =============

    def json_output(self) -> str:
        """
        Serialize the deck as a JSON array of JSON-encoded card contents.

        Raises:
            SerializationError: If any entry's content cannot be represented as JSON
        """
        with self._lock:
            records = [entry.record for entry in self._entries]

        encoded: list[str] = []
        for record in records:
            if not is_json_value(record.content):
                raise SerializationError(f"Card {record.id} has content that is not JSON-safe")
            try:
                encoded.append(_dump_compact(record.content))
            except (TypeError, ValueError) as exc:
                raise SerializationError(f"Failed to encode card {record.id}: {exc}") from exc
        return _dump_compact(encoded)

    def export_to_file(self, path: Path) -> Path:
        """Write json_output() to ``path``; nothing is written if serialization fails."""
        payload = self.json_output()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload, encoding="utf-8")
        logger.info(f"Exported {self.unique_card_count()} cards to {path}")
        return path

    # ============= Observers =============

    def add_listener(self, listener: DeckListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: DeckListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(self)
            except Exception:
                logger.exception("Deck listener failed")

    def _entry_at(self, index: int) -> DeckEntry:
        size = len(self._entries)
        if not 0 <= index < size:
            raise DeckIndexError(index, size)
        return self._entries[index]


def _dump_compact(value: object) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


__all__ = ["DeckEntry", "DeckListener", "DeckStore"]
