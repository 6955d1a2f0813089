"""Callback dispatchers that decide which thread runs completion handlers."""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from typing import Any

from loguru import logger

__all__ = ["Dispatcher", "ImmediateDispatcher", "QueueDispatcher"]


class Dispatcher:
    """Base dispatcher: runs a callback with the given arguments."""

    def call_after(self, callback: Callable[..., Any], *args: Any) -> None:
        raise NotImplementedError


class ImmediateDispatcher(Dispatcher):
    """Runs callbacks on whatever thread produced them."""

    def call_after(self, callback: Callable[..., Any], *args: Any) -> None:
        callback(*args)


class QueueDispatcher(Dispatcher):
    """Single-consumer queue of callbacks drained by the owning thread.

    Worker threads enqueue; only the thread calling process_pending() runs callbacks,
    so state touched by callbacks has exactly one writer.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[tuple[Callable[..., Any], tuple[Any, ...]]] = queue.Queue()
        self._owner: threading.Thread | None = None

    def call_after(self, callback: Callable[..., Any], *args: Any) -> None:
        self._queue.put((callback, args))

    def pending(self) -> int:
        return self._queue.qsize()

    def process_pending(self, timeout: float | None = None) -> int:
        """
        Run queued callbacks on the calling thread.

        Args:
            timeout: Seconds to wait for the first callback; None returns immediately
                when the queue is empty

        Returns:
            Number of callbacks executed
        """
        current = threading.current_thread()
        if self._owner is None:
            self._owner = current
        elif self._owner is not current:
            raise RuntimeError("QueueDispatcher drained from a thread that does not own it")

        processed = 0
        block = timeout is not None
        while True:
            try:
                callback, args = self._queue.get(block=block, timeout=timeout)
            except queue.Empty:
                return processed
            block = False
            try:
                callback(*args)
            except Exception:
                logger.exception(f"Dispatched callback {callback!r} failed")
            processed += 1
