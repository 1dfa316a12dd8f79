"""Port interfaces for upload adapters.

The batching queue and the logging handler depend only on this protocol,
not on boto3 directly.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from cloudwatch_handler.core.models import LogEvent, SequenceToken


@runtime_checkable
class LogUploaderPort(Protocol):
    """Port for shipping log events to a single destination stream.

    Adapters implementing this protocol thread the sequence token between
    consecutive uploads and serialize concurrent callers.
    Examples: CloudWatchLogsUploader, InMemoryUploader.
    """

    @property
    def sequence_token(self) -> SequenceToken:
        """Token the next upload will be sent with."""
        ...

    def ensure_destination(self) -> None:
        """Create the destination group and stream if they do not exist."""
        ...

    def put_events(self, events: Sequence[LogEvent]) -> SequenceToken:
        """Upload events in order.

        Args:
            events: Events forming one batch. An empty sequence is a no-op.

        Returns:
            The sequence token to use for the next upload.

        Raises:
            UploadError: If the upload fails. The token is left unchanged.
        """
        ...
