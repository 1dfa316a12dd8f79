"""Construct ready-to-use handlers backed by boto3."""

import logging
from typing import Any

from cloudwatch_handler.adapters.cloudwatch import CloudWatchLogsUploader, create_client
from cloudwatch_handler.adapters.logging import CloudWatchLogsHandler
from cloudwatch_handler.config import Option, build_config, load_settings

logger = logging.getLogger(__name__)


def create_handler(
    group: str,
    stream: str,
    *options: Option,
    region: str | None = None,
    client: Any = None,
    level: int = logging.NOTSET,
) -> CloudWatchLogsHandler:
    """Create a handler for a CloudWatch log stream.

    The log group and stream are created if they do not already exist.

    Args:
        group: Log group name.
        stream: Log stream name.
        *options: Functional options such as ``with_batch_duration(5)``.
        region: AWS region. Ignored when ``client`` is given; otherwise the
            SDK's default region chain applies when unset.
        client: A preconfigured boto3 ``logs`` client.
        level: Minimum level handled.

    Raises:
        ConfigurationError: If the group or stream name is empty.
        UploadError: If the group or stream cannot be described or created.
    """
    config = build_config(group, stream, *options)
    if client is None:
        client = create_client(region)
    uploader = CloudWatchLogsUploader(client, config)
    uploader.ensure_destination()
    logger.debug(
        "CloudWatch handler ready for %s/%s (batch interval: %s)",
        group,
        stream,
        config.batch_interval,
    )
    return CloudWatchLogsHandler(uploader, config, level=level)


def handler_from_env(
    *options: Option, client: Any = None, level: int = logging.NOTSET
) -> CloudWatchLogsHandler:
    """Create a handler configured from ``AWS_CLOUDWATCH_LOG_*`` variables.

    Options passed explicitly are applied after the environment's.
    """
    settings = load_settings()
    return create_handler(
        settings.group,
        settings.stream,
        *settings.to_options(),
        *options,
        region=settings.region,
        client=client,
        level=level,
    )
