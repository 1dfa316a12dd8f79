"""Integration tests for building handlers from options and the environment."""

import logging
from typing import Any

import pytest
from botocore.stub import ANY, Stubber

from cloudwatch_handler import (
    CloudWatchLogsHandler,
    ConfigurationError,
    UploadError,
    create_handler,
    handler_from_env,
    with_batch_duration,
)


def _stub_destination(stubber: Stubber, group: str, stream: str) -> None:
    stubber.add_response(
        "describe_log_groups",
        {"logGroups": [{"logGroupName": group}]},
        {"logGroupNamePrefix": group},
    )
    stubber.add_response(
        "describe_log_streams",
        {"logStreams": [{"logStreamName": stream, "uploadSequenceToken": "seed"}]},
        {"logGroupName": group, "logStreamNamePrefix": stream},
    )


@pytest.mark.adapters
class TestCreateHandler:
    """Tests for create_handler()."""

    def test_prepares_destination_and_uploads(
        self, logs_client: Any, stubber: Stubber
    ) -> None:
        _stub_destination(stubber, "g", "s")
        stubber.add_response(
            "put_log_events",
            {"nextSequenceToken": "next"},
            {
                "logGroupName": "g",
                "logStreamName": "s",
                "logEvents": ANY,
                "sequenceToken": "seed",
            },
        )

        handler = create_handler("g", "s", client=logs_client)
        handler.write("hello")
        handler.close()

        assert isinstance(handler, CloudWatchLogsHandler)
        assert handler.uploader.sequence_token == "next"

    def test_batched_handler_uploads_on_close(
        self, logs_client: Any, stubber: Stubber
    ) -> None:
        _stub_destination(stubber, "g", "s")
        stubber.add_response(
            "put_log_events",
            {"nextSequenceToken": "next"},
            {
                "logGroupName": "g",
                "logStreamName": "s",
                "logEvents": ANY,
                "sequenceToken": "seed",
            },
        )

        handler = create_handler(
            "g", "s", with_batch_duration(60), client=logs_client, level=logging.INFO
        )
        handler.write("one")
        handler.write("two")
        handler.close()

        assert handler.level == logging.INFO
        assert handler.uploader.sequence_token == "next"

    def test_empty_names_rejected_before_any_call(self, logs_client: Any) -> None:
        with pytest.raises(ConfigurationError):
            create_handler("", "s", client=logs_client)

    def test_provisioning_failure_raises(self, logs_client: Any, stubber: Stubber) -> None:
        stubber.add_client_error(
            "describe_log_groups", service_error_code="AccessDeniedException"
        )

        with pytest.raises(UploadError):
            create_handler("g", "s", client=logs_client)


@pytest.mark.adapters
class TestHandlerFromEnv:
    """Tests for handler_from_env()."""

    def test_reads_environment(
        self, logs_client: Any, stubber: Stubber, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("AWS_CLOUDWATCH_LOG_GROUP", "env-group")
        monkeypatch.setenv("AWS_CLOUDWATCH_LOG_STREAM", "env-stream")
        monkeypatch.setenv("AWS_CLOUDWATCH_LOG_BATCH_DURATION", "2s")
        for name in (
            "AWS_CLOUDWATCH_LOG_RETENTION_DAYS",
            "AWS_CLOUDWATCH_LOG_GROUP_TAGS",
            "AWS_CLOUDWATCH_LOG_KMS_KEY_ID",
        ):
            monkeypatch.delenv(name, raising=False)
        _stub_destination(stubber, "env-group", "env-stream")

        handler = handler_from_env(client=logs_client)
        handler.close()

        assert handler.config.group == "env-group"
        assert handler.config.stream == "env-stream"
        assert handler.config.batch_interval == 2.0

    def test_missing_variables_raise(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("AWS_CLOUDWATCH_LOG_GROUP", raising=False)
        monkeypatch.delenv("AWS_CLOUDWATCH_LOG_STREAM", raising=False)

        with pytest.raises(ConfigurationError):
            handler_from_env()
