"""BDD step definitions for batching features."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from cloudwatch_handler.adapters.in_memory import InMemoryUploader
from cloudwatch_handler.adapters.logging import CloudWatchLogsHandler
from cloudwatch_handler.config import (
    build_config,
    with_batch_duration,
    with_max_batch_events,
)
from cloudwatch_handler.core.errors import UploadError


@dataclass
class BatchingScenarioContext:
    """State shared between the steps of one scenario."""

    uploader: InMemoryUploader = field(default_factory=InMemoryUploader)
    handler: CloudWatchLogsHandler | None = None
    logger: logging.Logger | None = None
    logged: list[str] = field(default_factory=list)

    def attach(self, handler: CloudWatchLogsHandler) -> None:
        self.handler = handler
        self.logger = logging.getLogger("bdd.batching")
        self.logger.handlers.clear()
        self.logger.addHandler(handler)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False


@pytest.fixture
def ctx() -> Iterator[BatchingScenarioContext]:
    """Fresh scenario context for each test."""
    context = BatchingScenarioContext()
    yield context
    if context.handler is not None:
        context.handler.close()
    if context.logger is not None:
        context.logger.handlers.clear()


# === Given ===
@given("a handler without a batch duration")
def step_unbatched_handler(ctx: BatchingScenarioContext) -> None:
    ctx.attach(CloudWatchLogsHandler(ctx.uploader, build_config("g", "s")))


@given(parsers.parse("a handler with a batch duration of {seconds:d} seconds"))
def step_batched_handler(ctx: BatchingScenarioContext, seconds: int) -> None:
    config = build_config("g", "s", with_batch_duration(seconds))
    ctx.attach(CloudWatchLogsHandler(ctx.uploader, config))


@given(
    parsers.parse(
        "a handler with a batch duration of {seconds:d} seconds "
        "and at most {count:d} events per batch"
    )
)
def step_small_batch_handler(
    ctx: BatchingScenarioContext, seconds: int, count: int
) -> None:
    config = build_config(
        "g", "s", with_batch_duration(seconds), with_max_batch_events(count)
    )
    ctx.attach(CloudWatchLogsHandler(ctx.uploader, config))


@given("the uploader rejects uploads")
def step_uploader_rejects(ctx: BatchingScenarioContext) -> None:
    ctx.uploader.fail_with = RuntimeError("rejected")


# === When ===
@when(parsers.parse("{n:d} messages are logged"))
def step_log_messages(ctx: BatchingScenarioContext, n: int) -> None:
    assert ctx.logger is not None
    for _ in range(n):
        message = f"message {len(ctx.logged)}"
        ctx.logger.info(message)
        ctx.logged.append(message)


@when("the handler is flushed")
def step_flush(ctx: BatchingScenarioContext) -> None:
    assert ctx.handler is not None
    ctx.handler.flush()


@when("the uploader accepts uploads again")
def step_uploader_accepts(ctx: BatchingScenarioContext) -> None:
    ctx.uploader.fail_with = None


# === Then ===
@then(parsers.parse("the uploader received {count:d} batches"))
def step_batch_count(ctx: BatchingScenarioContext, count: int) -> None:
    assert len(ctx.uploader.batches) == count


@then("each upload carried the token returned by the previous one")
def step_tokens_threaded(ctx: BatchingScenarioContext) -> None:
    sent = ctx.uploader.tokens_sent
    assert sent[0] is None
    assert sent[1:] == [f"{i:056d}" for i in range(1, len(sent))]


@then("the uploaded messages are in logging order")
def step_messages_in_order(ctx: BatchingScenarioContext) -> None:
    assert [e.message for e in ctx.uploader.events] == ctx.logged


@then(parsers.parse("no batch holds more than {count:d} events"))
def step_batch_bound(ctx: BatchingScenarioContext, count: int) -> None:
    assert all(len(batch) <= count for batch in ctx.uploader.batches)


@then("the next write raises an upload error")
def step_next_write_raises(ctx: BatchingScenarioContext) -> None:
    assert ctx.handler is not None
    with pytest.raises(UploadError, match="rejected"):
        ctx.handler.write("after failure")


@then("the write after that succeeds")
def step_following_write_succeeds(ctx: BatchingScenarioContext) -> None:
    assert ctx.handler is not None
    assert ctx.handler.write("recovered") == len("recovered")
