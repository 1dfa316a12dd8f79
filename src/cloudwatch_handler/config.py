"""Handler configuration.

Two equivalent ways to configure a handler:

1. Programmatically, with functional options applied to a ``HandlerConfig``::

       config = build_config("my-group", "my-stream", with_batch_duration(5))

2. From ``AWS_CLOUDWATCH_LOG_*`` environment variables via
   ``CloudWatchSettings``, which converts to the same options.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cloudwatch_handler.core.errors import ConfigurationError
from cloudwatch_handler.core.models import DEFAULT_QUEUE_SIZE, MAX_BATCH_COUNT

# Values accepted by PutRetentionPolicy
VALID_RETENTION_DAYS = frozenset(
    {
        1, 3, 5, 7, 14, 30, 60, 90, 120, 150, 180, 365, 400, 545, 731,
        1096, 1827, 2192, 2557, 2922, 3288, 3653,
    }
)  # fmt: skip

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


@dataclass(frozen=True)
class HandlerConfig:
    """Settings for a CloudWatchLogsHandler.

    Attributes:
        group: Log group name.
        stream: Log stream name.
        retention_days: Retention applied when the group is created.
        kms_key_id: KMS key used to encrypt a newly created group.
        tags: Tags attached to a newly created group.
        batch_interval: Seconds between batch uploads. None uploads every
            event immediately.
        max_queue_size: Capacity of the pending-event queue when batching.
        max_batch_events: Most events sent in one batch upload.
    """

    group: str
    stream: str
    retention_days: int | None = None
    kms_key_id: str | None = None
    tags: dict[str, str] = field(default_factory=dict)
    batch_interval: float | None = None
    max_queue_size: int = DEFAULT_QUEUE_SIZE
    max_batch_events: int = MAX_BATCH_COUNT

    @property
    def batching(self) -> bool:
        """True when events are queued and uploaded on a timer."""
        return self.batch_interval is not None and self.batch_interval > 0


Option = Callable[[HandlerConfig], HandlerConfig]


def with_group_retention_days(days: int) -> Option:
    """Retain group logs for ``days``. Only applies when the group is created."""
    if days not in VALID_RETENTION_DAYS:
        raise ConfigurationError(
            f"retention days must be one of {sorted(VALID_RETENTION_DAYS)}, got {days}"
        )
    return lambda config: replace(config, retention_days=days)


def with_group_kms_key_id(key_id: str) -> Option:
    """Encrypt group data with a KMS key. Only applies when the group is created."""
    return lambda config: replace(config, kms_key_id=key_id or None)


def with_group_tags(tags: dict[str, str]) -> Option:
    """Tag the log group. Only applies when the group is created."""
    return lambda config: replace(config, tags=dict(tags))


def with_batch_duration(seconds: float) -> Option:
    """Upload queued events every ``seconds``.

    Without this option, or with a non-positive duration, every event is
    uploaded as soon as it is written.
    """
    return lambda config: replace(
        config, batch_interval=seconds if seconds > 0 else None
    )


def with_max_queue_size(size: int) -> Option:
    """Bound the number of events waiting for the next batch upload."""
    if size < 1:
        raise ConfigurationError(f"queue size must be positive, got {size}")
    return lambda config: replace(config, max_queue_size=size)


def with_max_batch_events(count: int) -> Option:
    """Send at most ``count`` events per batch (never more than 10,000)."""
    if not 1 <= count <= MAX_BATCH_COUNT:
        raise ConfigurationError(
            f"batch event count must be between 1 and {MAX_BATCH_COUNT}, got {count}"
        )
    return lambda config: replace(config, max_batch_events=count)


def build_config(group: str, stream: str, *options: Option) -> HandlerConfig:
    """Create a HandlerConfig and apply options in order."""
    if not group or not stream:
        raise ConfigurationError("log group and log stream names are required")
    config = HandlerConfig(group=group, stream=stream)
    for option in options:
        config = option(config)
    return config


def parse_duration(value: str) -> float:
    """Parse a duration such as ``"500ms"``, ``"5s"`` or ``"1h2m3.5s"``.

    Returns:
        The duration in seconds.

    Raises:
        ConfigurationError: If the string is not a valid duration.
    """
    text = value.strip()
    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]
    if text == "0":
        return 0.0
    if not text:
        raise ConfigurationError(f"invalid duration {value!r}")

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            raise ConfigurationError(f"invalid duration {value!r}")
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(text):
        raise ConfigurationError(f"invalid duration {value!r}")
    return sign * total


def parse_tags(value: str) -> dict[str, str]:
    """Parse ``"key=value,other=value"`` into a dict.

    A key without ``=`` maps to an empty string. Surrounding whitespace is
    trimmed from keys and values; entries with an empty key are ignored.
    """
    tags: dict[str, str] = {}
    for item in value.split(","):
        key, _, tag_value = item.partition("=")
        key = key.strip()
        if key:
            tags[key] = tag_value.strip()
    return tags


class CloudWatchSettings(BaseSettings):
    """Handler configuration read from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="AWS_CLOUDWATCH_LOG_",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    group: str = Field(description="Log group name")
    stream: str = Field(description="Log stream name")
    retention_days: int | None = Field(default=None, description="Group retention")
    batch_duration: float | None = Field(
        default=None, description="Batch upload interval, e.g. 5s"
    )
    group_tags: str = Field(default="", description="Comma-separated key=value tags")
    kms_key_id: str | None = Field(default=None, description="KMS key for the group")
    region: str | None = Field(
        default=None,
        validation_alias=AliasChoices("AWS_REGION", "AWS_DEFAULT_REGION"),
        description="AWS region; the SDK default chain is used when unset",
    )

    @field_validator("batch_duration", mode="before")
    @classmethod
    def _parse_batch_duration(cls, value: object) -> object:
        if isinstance(value, str):
            try:
                return parse_duration(value)
            except ConfigurationError as exc:
                raise ValueError(str(exc)) from exc
        return value

    @property
    def tags(self) -> dict[str, str]:
        return parse_tags(self.group_tags)

    def to_options(self) -> list[Option]:
        """Convert the settings to functional options."""
        options: list[Option] = []
        if self.retention_days is not None:
            options.append(with_group_retention_days(self.retention_days))
        if self.batch_duration is not None:
            options.append(with_batch_duration(self.batch_duration))
        if self.tags:
            options.append(with_group_tags(self.tags))
        if self.kms_key_id:
            options.append(with_group_kms_key_id(self.kms_key_id))
        return options

    def to_config(self) -> HandlerConfig:
        return build_config(self.group, self.stream, *self.to_options())


def load_settings() -> CloudWatchSettings:
    """Read settings from the environment.

    Raises:
        ConfigurationError: If a required variable is missing or a value is
            malformed.
    """
    try:
        return CloudWatchSettings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
