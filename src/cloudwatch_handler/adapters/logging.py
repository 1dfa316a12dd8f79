"""Python logging handler adapter for CloudWatch Logs.

This adapter bridges Python's standard library logging module to a
LogUploaderPort, either uploading each record immediately or queueing it
for a timed batch upload.
"""

import logging

from cloudwatch_handler.adapters.batching import BatchingQueue
from cloudwatch_handler.config import HandlerConfig
from cloudwatch_handler.core.errors import HandlerClosedError, UploadError
from cloudwatch_handler.core.models import LogEvent
from cloudwatch_handler.core.ports import LogUploaderPort

# Loggers whose records would feed back into the upload path
_IGNORED_LOGGER_PREFIXES = (
    "boto3",
    "botocore",
    "s3transfer",
    "urllib3",
    "cloudwatch_handler",
)


def _not_ignored(record: logging.LogRecord) -> bool:
    return not any(
        record.name == prefix or record.name.startswith(prefix + ".")
        for prefix in _IGNORED_LOGGER_PREFIXES
    )


class CloudWatchLogsHandler(logging.Handler):
    """Logging handler that ships formatted records to CloudWatch Logs.

    Level filtering and formatting are left to the logging framework; set a
    level and formatter on the handler as usual.

    Example:
        ```python
        from cloudwatch_handler import create_handler, with_batch_duration

        handler = create_handler("my-group", "my-stream", with_batch_duration(5))
        logging.getLogger().addHandler(handler)
        ```
    """

    def __init__(
        self,
        uploader: LogUploaderPort,
        config: HandlerConfig,
        level: int = logging.NOTSET,
    ) -> None:
        """Initialize the handler.

        Args:
            uploader: Adapter implementing LogUploaderPort. The destination is
                expected to exist already (see ``create_handler``).
            config: Handler settings. A positive ``batch_interval`` enables
                batching.
            level: Minimum level handled.
        """
        super().__init__(level)
        self.addFilter(_not_ignored)
        self._uploader = uploader
        self._config = config
        self._closed = False
        self._queue: BatchingQueue | None = None
        if config.batching:
            assert config.batch_interval is not None
            self._queue = BatchingQueue(
                uploader,
                config.batch_interval,
                max_queue_size=config.max_queue_size,
                max_count=config.max_batch_events,
            )

    @property
    def config(self) -> HandlerConfig:
        return self._config

    @property
    def uploader(self) -> LogUploaderPort:
        return self._uploader

    def emit(self, record: logging.LogRecord) -> None:
        """Format a record and write it to CloudWatch."""
        try:
            self.write(self.format(record), created=record.created)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)

    def write(self, message: str, created: float | None = None) -> int:
        """Upload a message or queue it for the next batch.

        Args:
            message: The formatted log line.
            created: Unix timestamp in seconds; defaults to now.

        Returns:
            Number of bytes accepted.

        Raises:
            UploadError: For unbatched writes, if the upload fails. For batched
                writes, if the previous batch upload failed; the current
                message is still queued.
            HandlerClosedError: If the handler has been closed.
        """
        if self._closed:
            raise HandlerClosedError("handler is closed")
        if created is None:
            event = LogEvent.now(message)
        else:
            event = LogEvent.at(created, message)
        written = len(event.message.encode("utf-8"))

        if self._queue is None:
            self._uploader.put_events([event])
            return written

        self._queue.put(event)
        error = self._queue.take_error()
        if error is not None:
            raise UploadError(f"previous batch upload failed: {error}") from error
        return written

    def flush(self) -> None:
        """Upload queued events now."""
        if self._queue is not None:
            self._queue.flush()

    def close(self) -> None:
        """Upload queued events and stop the batching thread."""
        self._closed = True
        if self._queue is not None:
            self._queue.close()
        super().close()

    def __repr__(self) -> str:
        level = logging.getLevelName(self.level)
        return (
            f"<{self.__class__.__name__} "
            f"{self._config.group}/{self._config.stream} ({level})>"
        )
