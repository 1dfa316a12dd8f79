"""Count- and size-bounded batch assembly for PutLogEvents."""

from collections.abc import Iterable, Iterator

from cloudwatch_handler.core.errors import BatchFullError
from cloudwatch_handler.core.models import MAX_BATCH_BYTES, MAX_BATCH_COUNT, LogEvent


class Batch:
    """An ordered run of log events that fits in a single upload.

    A batch never holds more than ``max_count`` events and the summed
    ``LogEvent.size`` of its events never exceeds ``max_bytes``.

    Args:
        max_count: Maximum number of events.
        max_bytes: Maximum cumulative size, including per-event overhead.
    """

    def __init__(
        self, max_count: int = MAX_BATCH_COUNT, max_bytes: int = MAX_BATCH_BYTES
    ) -> None:
        self._max_count = max_count
        self._max_bytes = max_bytes
        self._events: list[LogEvent] = []
        self._size = 0

    def __len__(self) -> int:
        return len(self._events)

    def __bool__(self) -> bool:
        return bool(self._events)

    @property
    def size(self) -> int:
        """Cumulative size of the events in the batch."""
        return self._size

    @property
    def events(self) -> tuple[LogEvent, ...]:
        """Events currently held, in insertion order."""
        return tuple(self._events)

    def fits(self, event: LogEvent) -> bool:
        """Return True if ``event`` can be added without breaking a bound."""
        return (
            len(self._events) < self._max_count
            and self._size + event.size <= self._max_bytes
        )

    def add(self, event: LogEvent) -> None:
        """Append an event.

        Raises:
            BatchFullError: If the event would exceed the count or size bound.
        """
        if not self.fits(event):
            raise BatchFullError(
                f"event of {event.size} bytes does not fit in batch "
                f"({len(self._events)} events, {self._size} bytes)"
            )
        self._events.append(event)
        self._size += event.size

    def drain(self) -> list[LogEvent]:
        """Return all events and reset the batch to empty."""
        events = self._events
        self._events = []
        self._size = 0
        return events


def iter_batches(
    events: Iterable[LogEvent],
    max_count: int = MAX_BATCH_COUNT,
    max_bytes: int = MAX_BATCH_BYTES,
) -> Iterator[list[LogEvent]]:
    """Pack events greedily, in order, into consecutive bounded batches.

    A new batch is started whenever the next event would not fit in the
    current one. Empty batches are never yielded.
    """
    batch = Batch(max_count, max_bytes)
    for event in events:
        if not batch.fits(event) and batch:
            yield batch.drain()
        batch.add(event)
    if batch:
        yield batch.drain()
