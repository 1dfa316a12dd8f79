"""Shared test fixtures for all test modules."""

import logging
from collections.abc import Callable, Iterator
from typing import Any

import boto3
import pytest
from botocore.stub import Stubber

from cloudwatch_handler.adapters.in_memory import InMemoryUploader
from cloudwatch_handler.adapters.logging import CloudWatchLogsHandler
from cloudwatch_handler.config import HandlerConfig, Option, build_config


@pytest.fixture
def uploader() -> InMemoryUploader:
    """Fixture providing an in-memory uploader that accepts every batch."""
    return InMemoryUploader()


@pytest.fixture
def logs_client() -> Any:
    """A real boto3 logs client with dummy credentials.

    Only ever used behind a Stubber, so no request leaves the process.
    """
    return boto3.client(
        "logs",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(logs_client: Any) -> Iterator[Stubber]:
    """Activated Stubber for ``logs_client``; asserts all responses were used."""
    with Stubber(logs_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


@pytest.fixture
def handler_factory(
    uploader: InMemoryUploader,
) -> Iterator[Callable[..., CloudWatchLogsHandler]]:
    """Factory fixture creating handlers that are closed after the test.

    Usage:
        def test_something(handler_factory):
            handler = handler_factory(with_batch_duration(60))
    """
    handlers: list[CloudWatchLogsHandler] = []

    def _make(*options: Option, config: HandlerConfig | None = None) -> CloudWatchLogsHandler:
        handler = CloudWatchLogsHandler(
            uploader, config or build_config("test-group", "test-stream", *options)
        )
        handlers.append(handler)
        return handler

    yield _make

    for handler in handlers:
        handler.close()


@pytest.fixture
def make_record() -> Callable[..., logging.LogRecord]:
    """Factory fixture for LogRecord instances."""

    def _record(
        msg: str = "test message",
        name: str = "test",
        level: int = logging.INFO,
        created: float | None = None,
    ) -> logging.LogRecord:
        record = logging.LogRecord(
            name=name,
            level=level,
            pathname="",
            lineno=0,
            msg=msg,
            args=(),
            exc_info=None,
        )
        if created is not None:
            record.created = created
        return record

    return _record
