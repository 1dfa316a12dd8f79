"""Send a single structured message to CloudWatch Logs.

Run with:
    AWS_CLOUDWATCH_LOG_GROUP=my-group AWS_CLOUDWATCH_LOG_STREAM=my-stream \
        python -m examples.basic

Credentials and region come from the standard AWS configuration chain.
"""

import logging
import sys

from cloudwatch_handler import CloudWatchHandlerError, ConfigurationError, handler_from_env
from examples._json import JsonFormatter


def main() -> int:
    try:
        handler = handler_from_env()
    except ConfigurationError as exc:
        print(
            f"ERROR: Please set AWS_CLOUDWATCH_LOG_GROUP and AWS_CLOUDWATCH_LOG_STREAM: {exc}",
            file=sys.stderr,
        )
        return 1
    except CloudWatchHandlerError as exc:
        print(f"ERROR: Failed to create handler: {exc}", file=sys.stderr)
        return 3

    handler.setFormatter(JsonFormatter())
    logger = logging.getLogger("example")
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)

    logger.info(
        "This is a test message",
        extra={"event": "testevent", "topic": "testtopic", "key": "testkey"},
    )
    handler.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
