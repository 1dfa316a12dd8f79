"""Exception hierarchy for cloudwatch_handler."""


class CloudWatchHandlerError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(CloudWatchHandlerError):
    """Raised when handler settings are missing or malformed."""


class UploadError(CloudWatchHandlerError):
    """Raised when CloudWatch Logs rejects or fails an upload.

    The underlying SDK exception is available as ``__cause__``.
    """


class BatchFullError(CloudWatchHandlerError):
    """Raised when an event does not fit in a batch."""


class HandlerClosedError(CloudWatchHandlerError):
    """Raised when writing to a handler or queue that has been closed."""
