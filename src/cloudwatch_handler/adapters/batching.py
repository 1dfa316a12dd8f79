"""Timer-driven batching queue in front of an uploader.

Events are pushed onto a bounded queue by the write path and drained by a
single worker thread, which packs them into bounded batches and uploads a
batch when the interval elapses or when the next event would not fit.
"""

import logging
import queue
import threading
import time

from cloudwatch_handler.core.batch import Batch
from cloudwatch_handler.core.errors import HandlerClosedError, UploadError
from cloudwatch_handler.core.models import (
    DEFAULT_QUEUE_SIZE,
    MAX_BATCH_BYTES,
    MAX_BATCH_COUNT,
    LogEvent,
)
from cloudwatch_handler.core.ports import LogUploaderPort

logger = logging.getLogger(__name__)


class _FlushRequest:
    """Queue marker asking the worker to send everything queued before it."""

    def __init__(self) -> None:
        self.done = threading.Event()


_STOP = object()


class BatchingQueue:
    """Bounded event queue drained by a background uploader thread.

    Failed uploads are not retried. The last failure is kept and handed to
    the next caller of ``take_error``.

    Args:
        uploader: Destination for assembled batches.
        interval: Seconds between timed uploads.
        max_queue_size: Capacity of the pending-event queue. ``put`` blocks
            while the queue is full.
        max_count: Maximum events per batch.
        max_bytes: Maximum cumulative event size per batch.
    """

    def __init__(
        self,
        uploader: LogUploaderPort,
        interval: float,
        max_queue_size: int = DEFAULT_QUEUE_SIZE,
        max_count: int = MAX_BATCH_COUNT,
        max_bytes: int = MAX_BATCH_BYTES,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"batch interval must be positive, got {interval}")
        self._uploader = uploader
        self._interval = interval
        self._max_count = max_count
        self._max_bytes = max_bytes
        self._queue: queue.Queue[object] = queue.Queue(maxsize=max_queue_size)
        self._error: UploadError | None = None
        self._error_lock = threading.Lock()
        self._closed = False
        # held across the closed check and the enqueue so nothing lands after _STOP
        self._state_lock = threading.Lock()
        self._thread = threading.Thread(
            target=self._run, name="cloudwatch-batcher", daemon=True
        )
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, event: LogEvent) -> None:
        """Queue an event for the next batch upload."""
        with self._state_lock:
            if self._closed:
                raise HandlerClosedError("batching queue is closed")
            self._queue.put(event)

    def take_error(self) -> UploadError | None:
        """Return the last upload failure, if any, and clear it."""
        with self._error_lock:
            error, self._error = self._error, None
        return error

    def flush(self, timeout: float | None = None) -> bool:
        """Upload everything queued so far.

        Returns:
            True if the worker finished within ``timeout``.
        """
        request = _FlushRequest()
        with self._state_lock:
            if self._closed or not self._thread.is_alive():
                return True
            self._queue.put(request)
        return request.done.wait(timeout)

    def close(self, timeout: float | None = None) -> None:
        """Upload remaining events and stop the worker thread."""
        with self._state_lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        self._thread.join(timeout)

    def _run(self) -> None:
        batch = Batch(self._max_count, self._max_bytes)
        deadline = time.monotonic() + self._interval
        while True:
            now = time.monotonic()
            if now >= deadline:
                self._send(batch.drain())
                deadline = now + self._interval
            try:
                item = self._queue.get(timeout=max(0.0, deadline - now))
            except queue.Empty:
                continue

            if item is _STOP:
                self._send(batch.drain())
                return
            if isinstance(item, _FlushRequest):
                self._send(batch.drain())
                item.done.set()
                continue
            assert isinstance(item, LogEvent)
            if not batch.fits(item):
                self._send(batch.drain())
            batch.add(item)

    def _send(self, events: list[LogEvent]) -> None:
        if not events:
            return
        # PutLogEvents requires chronological order within a batch
        events = sorted(events, key=lambda event: event.timestamp)
        try:
            self._uploader.put_events(events)
        except Exception as exc:
            logger.warning("Dropped batch of %d log events: %s", len(events), exc)
            error = exc if isinstance(exc, UploadError) else UploadError(str(exc))
            if error is not exc:
                error.__cause__ = exc
            with self._error_lock:
                self._error = error
