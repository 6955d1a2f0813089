from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from typing import Any

from loguru import logger

from utils.dispatch import Dispatcher, ImmediateDispatcher

__all__ = ["BackgroundWorker"]


class BackgroundWorker:
    """Runs blocking calls (card lookups, image downloads) on daemon threads.

    Completion callbacks never run on the worker thread directly; they are handed
    to the dispatcher, which decides the thread that executes them.
    """

    def __init__(self, dispatcher: Dispatcher | None = None) -> None:
        self.dispatcher = dispatcher or ImmediateDispatcher()
        self._stop_event = threading.Event()
        self._active: set[threading.Thread] = set()
        self._lock = threading.Lock()
        self._task_ids = itertools.count(1)

    def submit(
        self,
        func: Callable[..., Any],
        *args: Any,
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        **kwargs: Any,
    ) -> None:
        """Run ``func(*args, **kwargs)`` on a new thread.

        Exactly one of on_success (with the return value) or on_error (with the
        raised exception) is dispatched when the call ends. Long-running work
        should poll is_stopped() and return early once it is set.
        """
        name = f"palpad-{getattr(func, '__name__', 'task')}-{next(self._task_ids)}"

        def run() -> None:
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                logger.debug(f"{name} raised {type(exc).__name__}: {exc}")
                if on_error is not None:
                    self.dispatcher.call_after(on_error, exc)
            else:
                if on_success is not None:
                    self.dispatcher.call_after(on_success, result)
            finally:
                with self._lock:
                    self._active.discard(threading.current_thread())

        thread = threading.Thread(target=run, name=name, daemon=True)
        with self._lock:
            self._active.add(thread)
        thread.start()
        logger.debug(f"Started {name}")

    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    def _snapshot(self) -> list[threading.Thread]:
        with self._lock:
            return list(self._active)

    def join(self, timeout: float | None = None) -> None:
        """Wait for every running task to return, without asking it to stop."""
        for thread in self._snapshot():
            thread.join(timeout=timeout)

    def shutdown(self, timeout: float = 10.0) -> None:
        """Set the stop flag and wait up to ``timeout`` seconds per running task."""
        self._stop_event.set()
        stragglers = []
        for thread in self._snapshot():
            thread.join(timeout=timeout)
            if thread.is_alive():
                stragglers.append(thread.name)
        if stragglers:
            logger.warning(f"Background tasks still running after shutdown: {', '.join(stragglers)}")
        else:
            logger.debug("Background worker stopped")

    def __enter__(self) -> BackgroundWorker:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.shutdown()
