"""Key-batching serial queue: one action at a time, grouped by key."""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class BatchingQueue(Generic[K]):
    """Runs submitted actions one at a time on a single worker thread.

    Actions are grouped by key.  Once the worker starts on a key it drains
    every action queued for that key before moving to the next key, so
    callers asking for the same key back-to-back share one switch.  Keys are
    served in the order they were first queued.  Each action still runs on
    its own and settles only its own future.
    """

    def __init__(self) -> None:
        self._batches: dict[K, list[Callable[[], None]]] = {}
        self._current_key: K | None = None
        self._running = False
        self._closed = False
        self._guard = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gitversions-queue")

    def enqueue(self, key: K, fn: Callable[[], T]) -> Future[T]:
        """Queue *fn* under *key* and return a future for its result.

        Raises:
            RuntimeError: If the queue has been closed.
        """
        future: Future[T] = Future()

        def run() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = fn()
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

        with self._guard:
            if self._closed:
                raise RuntimeError("BatchingQueue is closed")
            self._batches.setdefault(key, []).append(run)
            if not self._running:
                self._running = True
                self._executor.submit(self._drain)
        return future

    def _next_batch(self) -> list[Callable[[], None]] | None:
        with self._guard:
            if not self._batches:
                self._running = False
                return None
            if self._current_key not in self._batches:
                self._current_key = next(iter(self._batches))
            return self._batches.pop(self._current_key)

    def _drain(self) -> None:
        while True:
            batch = self._next_batch()
            if batch is None:
                return
            for run in batch:
                run()

    def close(self) -> None:
        """Stop accepting work and wait for queued actions to finish."""
        with self._guard:
            self._closed = True
        self._executor.shutdown(wait=True)

    def __enter__(self) -> BatchingQueue[K]:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
