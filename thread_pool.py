"""Bounded worker pool for accepted client connections."""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from request import HTTPRequestParseError
from socket_handler import LineBuffer

logger = logging.getLogger(__name__)

T = TypeVar("T")
JobHandler = Callable[[LineBuffer, T], None]

_CLOSED = object()


class ThreadPool(Generic[T]):
    """Fixed-size thread pool fed through a bounded handoff queue.

    Every submitted item is delivered to exactly one worker. ``submit`` blocks
    while the queue is full, so a fast producer is throttled to the speed of
    the workers instead of piling up unbounded work.
    """

    def __init__(
        self,
        worker_count: int,
        handler: JobHandler[T],
        queue_size: int | None = None,
    ) -> None:
        if worker_count <= 0:
            raise ValueError("worker_count must be positive")
        if queue_size is None:
            queue_size = worker_count
        if queue_size <= 0:
            raise ValueError("queue_size must be positive")

        self._handler = handler
        self._queue: queue.Queue[object] = queue.Queue(maxsize=queue_size)
        self._threads: list[threading.Thread] = []
        self._worker_count = worker_count
        self._submit_lock = threading.Lock()
        self._closed = False
        self._error_lock = threading.Lock()
        self._error_count = 0

        for index in range(worker_count):
            worker = threading.Thread(
                target=self._worker_loop,
                name=f"http-worker-{index}",
                daemon=True,
            )
            self._threads.append(worker)
            worker.start()

    @property
    def worker_count(self) -> int:
        return self._worker_count

    @property
    def threads(self) -> tuple[threading.Thread, ...]:
        return tuple(self._threads)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def error_count(self) -> int:
        with self._error_lock:
            return self._error_count

    def submit(self, item: T) -> bool:
        """Hand ``item`` to the next free worker, blocking while the queue is full.

        Returns False without enqueuing when the pool has been closed.
        """
        with self._submit_lock:
            if self._closed:
                return False
            self._queue.put(item)
        return True

    def close(self) -> None:
        """Stop accepting work, drain queued items and join every worker."""
        with self._submit_lock:
            if self._closed:
                return
            self._closed = True

        # One marker per worker, queued behind everything already submitted.
        for _ in self._threads:
            self._queue.put(_CLOSED)

        for thread in self._threads:
            thread.join()

    def __enter__(self) -> "ThreadPool[T]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _record_error(self) -> None:
        with self._error_lock:
            self._error_count += 1

    def _worker_loop(self) -> None:
        buffer = LineBuffer()
        while True:
            item = self._queue.get()
            try:
                if item is _CLOSED:
                    return
                try:
                    self._handler(buffer, item)
                except (HTTPRequestParseError, OSError) as exc:
                    self._record_error()
                    logger.warning("Error when handling connection: %s", exc)
                except Exception:
                    self._record_error()
                    logger.exception("Unhandled error when handling connection")
            finally:
                self._queue.task_done()
