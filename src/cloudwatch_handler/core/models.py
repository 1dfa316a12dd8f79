"""Core domain models for CloudWatch Logs uploads."""

import time
from dataclasses import dataclass

# PutLogEvents request limits
MAX_BATCH_COUNT = 10_000
MAX_BATCH_BYTES = 1_048_576
EVENT_OVERHEAD_BYTES = 26

# Largest message that still fits in an otherwise empty batch
MAX_MESSAGE_BYTES = MAX_BATCH_BYTES - EVENT_OVERHEAD_BYTES

DEFAULT_QUEUE_SIZE = 10_000

# Opaque cursor returned by PutLogEvents; None before the first upload
SequenceToken = str | None


def truncate_message(message: str, max_bytes: int = MAX_MESSAGE_BYTES) -> str:
    """Trim a message so its UTF-8 encoding is at most ``max_bytes`` long.

    Truncation happens on a character boundary, never inside a multi-byte
    sequence.
    """
    encoded = message.encode("utf-8")
    if len(encoded) <= max_bytes:
        return message
    return encoded[:max_bytes].decode("utf-8", errors="ignore")


@dataclass(frozen=True)
class LogEvent:
    """A single log event destined for a CloudWatch log stream.

    Attributes:
        timestamp: Unix timestamp in milliseconds.
        message: The formatted log line.
    """

    timestamp: int
    message: str

    @classmethod
    def now(cls, message: str) -> "LogEvent":
        """Create an event stamped with the current time."""
        return cls.at(time.time(), message)

    @classmethod
    def at(cls, created: float, message: str) -> "LogEvent":
        """Create an event from a Unix timestamp in seconds.

        Characters UTF-8 cannot encode, such as lone surrogates, are
        replaced by backslash escapes. Messages too large to ever fit in a
        batch are truncated.
        """
        text = message.encode("utf-8", errors="backslashreplace").decode("utf-8")
        return cls(timestamp=int(created * 1000), message=truncate_message(text))

    @property
    def size(self) -> int:
        """Bytes this event counts against the batch size limit."""
        return len(self.message.encode("utf-8")) + EVENT_OVERHEAD_BYTES

    def to_input(self) -> dict[str, str | int]:
        """Return the InputLogEvent mapping expected by boto3."""
        return {"timestamp": self.timestamp, "message": self.message}
