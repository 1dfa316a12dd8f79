"""Python logging handler that ships records to Amazon CloudWatch Logs."""

from cloudwatch_handler.adapters.batching import BatchingQueue
from cloudwatch_handler.adapters.cloudwatch import CloudWatchLogsUploader
from cloudwatch_handler.adapters.in_memory import InMemoryUploader
from cloudwatch_handler.adapters.logging import CloudWatchLogsHandler
from cloudwatch_handler.config import (
    CloudWatchSettings,
    HandlerConfig,
    Option,
    build_config,
    load_settings,
    with_batch_duration,
    with_group_kms_key_id,
    with_group_retention_days,
    with_group_tags,
    with_max_batch_events,
    with_max_queue_size,
)
from cloudwatch_handler.core.batch import Batch, iter_batches
from cloudwatch_handler.core.errors import (
    BatchFullError,
    CloudWatchHandlerError,
    ConfigurationError,
    HandlerClosedError,
    UploadError,
)
from cloudwatch_handler.core.models import LogEvent, SequenceToken
from cloudwatch_handler.core.ports import LogUploaderPort
from cloudwatch_handler.factory import create_handler, handler_from_env

__all__ = [
    # Handler
    "CloudWatchLogsHandler",
    "create_handler",
    "handler_from_env",
    # Configuration
    "CloudWatchSettings",
    "HandlerConfig",
    "Option",
    "build_config",
    "load_settings",
    "with_batch_duration",
    "with_group_kms_key_id",
    "with_group_retention_days",
    "with_group_tags",
    "with_max_batch_events",
    "with_max_queue_size",
    # Upload path
    "Batch",
    "BatchingQueue",
    "CloudWatchLogsUploader",
    "InMemoryUploader",
    "LogEvent",
    "LogUploaderPort",
    "SequenceToken",
    "iter_batches",
    # Errors
    "BatchFullError",
    "CloudWatchHandlerError",
    "ConfigurationError",
    "HandlerClosedError",
    "UploadError",
]
