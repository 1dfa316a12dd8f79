"""In-memory upload adapter."""

import threading
from collections.abc import Sequence

from cloudwatch_handler.core.errors import UploadError
from cloudwatch_handler.core.models import LogEvent, SequenceToken


class InMemoryUploader:
    """In-memory implementation of LogUploaderPort.

    Records every uploaded batch along with the token it was sent with, and
    issues a fresh sequence token for each accepted batch. Like the service,
    it rejects a put whose token is not the one it issued last, and hands
    the expected token back so the next put can succeed. Suitable for
    testing and local development where nothing should leave the process.

    Args:
        fail_with: Exception raised (wrapped in UploadError) by the next
            uploads until cleared.
    """

    def __init__(self, fail_with: Exception | None = None) -> None:
        self._lock = threading.Lock()
        self._sequence_token: SequenceToken = None
        self._expected_token: SequenceToken = None
        self._counter = 0
        self.fail_with = fail_with
        self.batches: list[list[LogEvent]] = []
        self.tokens_sent: list[SequenceToken] = []
        self.destination_ready = False

    @property
    def sequence_token(self) -> SequenceToken:
        return self._sequence_token

    @sequence_token.setter
    def sequence_token(self, token: SequenceToken) -> None:
        """Move the client-side cursor without telling the service."""
        self._sequence_token = token

    @property
    def events(self) -> list[LogEvent]:
        """All uploaded events, flattened in upload order."""
        return [event for batch in self.batches for event in batch]

    def ensure_destination(self) -> None:
        self.destination_ready = True

    def put_events(self, events: Sequence[LogEvent]) -> SequenceToken:
        if not events:
            return self._sequence_token
        with self._lock:
            self.tokens_sent.append(self._sequence_token)
            if self.fail_with is not None:
                raise UploadError(f"upload failed: {self.fail_with}") from self.fail_with
            if self._sequence_token != self._expected_token:
                sent, self._sequence_token = self._sequence_token, self._expected_token
                raise UploadError(
                    f"invalid sequence token {sent!r}, "
                    f"expected {self._expected_token!r}"
                )
            self.batches.append(list(events))
            self._counter += 1
            self._expected_token = f"{self._counter:056d}"
            self._sequence_token = self._expected_token
            return self._sequence_token
