"""boto3 adapter for the CloudWatch Logs ingestion API."""

import logging
import threading
from collections.abc import Sequence
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from cloudwatch_handler.config import HandlerConfig
from cloudwatch_handler.core.errors import UploadError
from cloudwatch_handler.core.models import LogEvent, SequenceToken

logger = logging.getLogger(__name__)

# Error codes whose response carries the token the service expects next
_TOKEN_MISMATCH_CODES = frozenset(
    {"InvalidSequenceTokenException", "DataAlreadyAcceptedException"}
)


def _error_code(exc: ClientError) -> str:
    return exc.response.get("Error", {}).get("Code", "")


def create_client(region: str | None = None) -> Any:
    """Create a CloudWatch Logs client using the default credential chain."""
    if region:
        return boto3.client("logs", region_name=region)
    return boto3.client("logs")


class CloudWatchLogsUploader:
    """CloudWatch Logs implementation of LogUploaderPort.

    Threads the stream's sequence token between consecutive PutLogEvents
    calls. All uploads go through a single lock so that two callers never
    send with the same token.

    Args:
        client: A boto3 ``logs`` client.
        config: Destination and group-creation settings.
    """

    def __init__(self, client: Any, config: HandlerConfig) -> None:
        self._client = client
        self._config = config
        self._lock = threading.Lock()
        self._sequence_token: SequenceToken = None

    @property
    def group(self) -> str:
        return self._config.group

    @property
    def stream(self) -> str:
        return self._config.stream

    @property
    def sequence_token(self) -> SequenceToken:
        return self._sequence_token

    def ensure_destination(self) -> None:
        """Create the log group and stream if they do not exist yet."""
        try:
            self.ensure_log_group()
            self.ensure_log_stream()
        except (ClientError, BotoCoreError) as exc:
            raise UploadError(
                f"unable to prepare {self.group}/{self.stream}: {exc}"
            ) from exc

    def ensure_log_group(self) -> None:
        """Create the log group unless a group with the exact name exists.

        Tags, KMS key and retention are only applied to a newly created group.
        """
        if self._find_log_group() is not None:
            return

        params: dict[str, Any] = {"logGroupName": self.group}
        if self._config.tags:
            params["tags"] = dict(self._config.tags)
        if self._config.kms_key_id:
            params["kmsKeyId"] = self._config.kms_key_id
        try:
            self._client.create_log_group(**params)
        except ClientError as exc:
            if _error_code(exc) != "ResourceAlreadyExistsException":
                raise
            logger.debug("Log group %s created concurrently", self.group)
            return
        logger.info("Created log group %s", self.group)

        if self._config.retention_days is not None:
            self._client.put_retention_policy(
                logGroupName=self.group,
                retentionInDays=self._config.retention_days,
            )

    def ensure_log_stream(self) -> None:
        """Create the log stream if needed and seed the sequence token."""
        if self._find_log_stream() is not None:
            return

        try:
            self._client.create_log_stream(
                logGroupName=self.group, logStreamName=self.stream
            )
            logger.info("Created log stream %s/%s", self.group, self.stream)
        except ClientError as exc:
            if _error_code(exc) != "ResourceAlreadyExistsException":
                raise

        # re-read so the token matches the stream as the service sees it
        self._find_log_stream()

    def _find_log_group(self) -> dict[str, Any] | None:
        paginator = self._client.get_paginator("describe_log_groups")
        for page in paginator.paginate(logGroupNamePrefix=self.group):
            for group in page.get("logGroups", []):
                if group.get("logGroupName") == self.group:
                    return group
        return None

    def _find_log_stream(self) -> dict[str, Any] | None:
        paginator = self._client.get_paginator("describe_log_streams")
        pages = paginator.paginate(
            logGroupName=self.group, logStreamNamePrefix=self.stream
        )
        for page in pages:
            for stream in page.get("logStreams", []):
                if stream.get("logStreamName") == self.stream:
                    with self._lock:
                        self._sequence_token = stream.get("uploadSequenceToken")
                    return stream
        return None

    def put_events(self, events: Sequence[LogEvent]) -> SequenceToken:
        """Upload one batch of events with the current sequence token."""
        if not events:
            return self._sequence_token

        with self._lock:
            params: dict[str, Any] = {
                "logGroupName": self.group,
                "logStreamName": self.stream,
                "logEvents": [event.to_input() for event in events],
            }
            if self._sequence_token is not None:
                params["sequenceToken"] = self._sequence_token
            try:
                response = self._client.put_log_events(**params)
            except ClientError as exc:
                if _error_code(exc) in _TOKEN_MISMATCH_CODES:
                    expected = exc.response.get("expectedSequenceToken")
                    if expected:
                        self._sequence_token = expected
                raise UploadError(
                    f"PutLogEvents to {self.group}/{self.stream} failed: {exc}"
                ) from exc
            except BotoCoreError as exc:
                raise UploadError(
                    f"PutLogEvents to {self.group}/{self.stream} failed: {exc}"
                ) from exc

            rejected = response.get("rejectedLogEventsInfo")
            if rejected:
                logger.warning(
                    "CloudWatch rejected part of a batch for %s/%s: %s",
                    self.group,
                    self.stream,
                    rejected,
                )
            self._sequence_token = response.get("nextSequenceToken")
            return self._sequence_token
