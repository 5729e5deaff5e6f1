"""
Configuration models for logrota using Pydantic v2 Settings.

``Settings`` reads the ``LOG_*`` environment once. ``SinkConfig`` is the
frozen, validated snapshot handed to a :class:`~logrota.core.sink.LogSink`;
core logic only ever sees ``SinkConfig`` and never reads the environment.
"""

from __future__ import annotations

import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError, InvalidSizeFormat
from .levels import INFO, MAX_LEVEL, MIN_LEVEL, parse_level
from .sizes import parse_size


class RotationStrategy(str, Enum):
    NONE = "none"
    SIZE = "size"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def is_time_based(self) -> bool:
        return self in _TIME_STRATEGIES


_TIME_STRATEGIES = frozenset(
    {
        RotationStrategy.HOURLY,
        RotationStrategy.DAILY,
        RotationStrategy.WEEKLY,
        RotationStrategy.MONTHLY,
    }
)


def _default_name() -> str:
    script = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else ""
    return script or "logrota"


def normalize_log_path(path: str | os.PathLike[str]) -> Path:
    """Expand ``~`` and append ``.log`` when the basename has no extension."""
    p = Path(path).expanduser()
    if not p.suffix:
        p = p.with_name(p.name + ".log")
    return p


class SinkConfig(BaseModel):
    """Immutable per-sink configuration.

    Invariants: ``max_bytes > 0`` when the strategy is ``size``;
    ``keep_days >= 0``; ``buffer_capacity >= 1``; ``min_level`` in 0..4;
    ``name`` non-empty.
    """

    model_config = ConfigDict(frozen=True)

    active_path: Path | None = Field(
        default=None, description="Active log file; None disables file output"
    )
    rotation_enabled: bool = Field(default=False)
    strategy: RotationStrategy = Field(default=RotationStrategy.NONE)
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    keep_days: int = Field(default=30, ge=0)
    buffer_capacity: int = Field(default=10, ge=1)
    min_level: int = Field(default=INFO, ge=MIN_LEVEL, le=MAX_LEVEL)
    name: str = Field(default_factory=_default_name)

    @field_validator("active_path", mode="before")
    @classmethod
    def _normalize_path(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str) and not value.strip():
            return None
        return normalize_log_path(value)

    @field_validator("name")
    @classmethod
    def _ensure_name_non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @model_validator(mode="after")
    def _check_size_strategy(self) -> SinkConfig:
        if self.strategy is RotationStrategy.SIZE and self.max_bytes <= 0:
            raise ValueError("max_bytes must be > 0 for size rotation")
        return self

    @property
    def lock_path(self) -> Path | None:
        if self.active_path is None:
            return None
        return self.active_path.with_name(self.active_path.name + ".lock")


class Settings(BaseSettings):
    """Environment-facing settings (``LOG_LEVEL``, ``LOG_FILE`` ...)."""

    level: int = Field(
        default=INFO, description="Minimum level, 0 (DEBUG) to 4 (FATAL)"
    )
    file: str = Field(
        default="", description="Log file path; empty disables file output"
    )
    rotation: bool = Field(default=False, description="Enable automatic rotation")
    rotation_type: Literal["none", "size", "hourly", "daily", "weekly", "monthly"] = (
        Field(default="daily", description="Rotation strategy")
    )
    max_size: str = Field(default="10M", description="Size threshold, e.g. 1K, 10M")
    keep_days: int = Field(default=30, ge=0, description="Retention window in days")
    buffer_size: int = Field(
        default=10, ge=1, description="Records held before a flush"
    )
    json_output: bool = Field(
        default=False,
        validation_alias=AliasChoices("json_output", "LOG_JSON"),
        description="Render records as JSON lines",
    )
    use_color: bool = Field(default=True, description="Colour console output")
    show_context: bool = Field(default=False, description="Include file:line context")
    name: str = Field(default_factory=_default_name, description="Identifying name")
    enable_metrics: bool = Field(default=False, description="Prometheus counters")
    internal_diagnostics: bool = Field(
        default=True, description="Emit warnings about logging failures to stderr"
    )
    signal_handlers: bool = Field(
        default=True, description="Flush sinks on SIGINT/SIGTERM"
    )
    atexit_flush: bool = Field(default=True, description="Flush sinks at exit")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> int:
        return parse_level(value)

    @field_validator("max_size")
    @classmethod
    def _validate_max_size(cls, value: str) -> str:
        try:
            parse_size(value)
        except InvalidSizeFormat as e:
            raise ValueError(e.message) from None
        return value.strip()

    @field_validator("name")
    @classmethod
    def _ensure_name_non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    def to_sink_config(self) -> SinkConfig:
        """Freeze the file-related settings into a ``SinkConfig``."""
        return build_sink_config(
            active_path=self.file or None,
            rotation_enabled=self.rotation,
            strategy=self.rotation_type,
            max_bytes=parse_size(self.max_size),
            keep_days=self.keep_days,
            buffer_capacity=self.buffer_size,
            min_level=self.level,
            name=self.name,
        )


def build_sink_config(**values: Any) -> SinkConfig:
    """Build a ``SinkConfig``, converting validation failures.

    Raises:
        ConfigurationError: If any value violates the configuration invariants.
    """
    try:
        return SinkConfig(**values)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid sink configuration: {_summarize(e)}", cause=e
        ) from e


def load_settings(**overrides: Any) -> Settings:
    """Read ``Settings`` from the environment.

    Raises:
        ConfigurationError: If an environment value is invalid.
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid logging settings: {_summarize(e)}", cause=e
        ) from e


def _summarize(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(x) for x in item.get("loc", ())) or "config"
        parts.append(f"{loc}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)
