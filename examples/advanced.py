"""Send ten batched messages to CloudWatch Logs, five seconds apart.

Run with:
    AWS_CLOUDWATCH_LOG_GROUP=my-group \
    AWS_CLOUDWATCH_LOG_STREAM=my-stream \
    AWS_CLOUDWATCH_LOG_RETENTION_DAYS=7 \
    AWS_CLOUDWATCH_LOG_BATCH_DURATION=15s \
    AWS_CLOUDWATCH_LOG_GROUP_TAGS="team=platform,env=dev" \
        python -m examples.advanced

Retention and tags only take effect when the group is created.
"""

import logging
import sys
import time

from cloudwatch_handler import (
    CloudWatchHandlerError,
    ConfigurationError,
    create_handler,
    load_settings,
)
from examples._json import JsonFormatter


def main() -> int:
    try:
        settings = load_settings()
        options = settings.to_options()
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    try:
        handler = create_handler(
            settings.group, settings.stream, *options, region=settings.region
        )
    except CloudWatchHandlerError as exc:
        print(f"ERROR: Failed to create handler: {exc}", file=sys.stderr)
        return 3

    handler.setFormatter(JsonFormatter())
    logger = logging.getLogger("example")
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)

    try:
        for _ in range(10):
            print("Sending INFO message")
            logger.info(
                "This is a test message",
                extra={"event": "testevent", "topic": "testtopic", "key": "testkey"},
            )
            time.sleep(5)
    finally:
        handler.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
