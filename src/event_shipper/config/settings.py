"""
Module: settings.py
Description: Component configuration using pydantic-settings.

Each pipeline component reads its settings once at construction, from
keyword arguments or environment variables, with validation and
defaults. Supports .env files for local development. Settings objects
are frozen so one instance can be shared across invocations.
"""

import httpx
from typing import Any, Optional, Type, TypeVar
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from event_shipper.exceptions import ConfigError

DEFAULT_CONNECT_TIMEOUT = 5000
DEFAULT_REQUEST_TIMEOUT = 5000
DEFAULT_CONTENT_TYPE = "text/plain"
DEFAULT_ACCEPT_HEADER = "text/plain"

_SettingsT = TypeVar("_SettingsT", bound=BaseSettings)


class ExtractorSettings(BaseSettings):
    """Field extractor settings (EXTRACTOR_* environment variables)."""

    model_config = SettingsConfigDict(
        env_prefix="EXTRACTOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )

    property_name: str = Field(
        ...,
        min_length=1,
        description="Top-level JSON field whose string value replaces the event body"
    )


class DeliverySettings(BaseSettings):
    """HTTP sink settings (HTTP_SINK_* environment variables)."""

    model_config = SettingsConfigDict(
        env_prefix="HTTP_SINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )

    endpoint: str = Field(
        ...,
        description="Fully qualified URL the sink POSTs events to"
    )
    connect_timeout: int = Field(
        default=DEFAULT_CONNECT_TIMEOUT,
        ge=0,
        description="Socket connect timeout in milliseconds (0 disables it)"
    )
    request_timeout: int = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        ge=0,
        description="Request read/write timeout in milliseconds (0 disables it)"
    )
    content_type_header: str = Field(
        default=DEFAULT_CONTENT_TYPE,
        min_length=1,
        description="Content-Type header sent with each event"
    )
    accept_header: str = Field(
        default=DEFAULT_ACCEPT_HEADER,
        min_length=1,
        description="Accept header sent with each event"
    )

    @field_validator('endpoint')
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Validate endpoint is an absolute HTTP/HTTPS URL."""
        if not v or not isinstance(v, str):
            raise ValueError("endpoint must be a non-empty string")

        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            raise ValueError(f"endpoint URL invalid: {e}") from e

        if url.scheme not in ('http', 'https') or not url.host:
            raise ValueError("endpoint must be an absolute HTTP/HTTPS URL")

        return v

    @property
    def timeout(self) -> httpx.Timeout:
        """httpx timeout built from the millisecond settings."""
        return httpx.Timeout(
            _to_seconds(self.request_timeout),
            connect=_to_seconds(self.connect_timeout)
        )


class RunnerSettings(BaseSettings):
    """Sink runner backoff pacing (SINK_RUNNER_* environment variables)."""

    model_config = SettingsConfigDict(
        env_prefix="SINK_RUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True
    )

    backoff_increment_ms: int = Field(
        default=1000,
        ge=0,
        description="Sleep added for each consecutive BACKOFF outcome"
    )
    max_backoff_ms: int = Field(
        default=5000,
        ge=0,
        description="Upper bound of the sleep after a BACKOFF outcome"
    )


def _to_seconds(milliseconds: int) -> Optional[float]:
    # 0 means wait indefinitely
    if milliseconds == 0:
        return None
    return milliseconds / 1000.0


def _load(settings_cls: Type[_SettingsT], **values: Any) -> _SettingsT:
    try:
        return settings_cls(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid {settings_cls.__name__}: {e}") from e


def load_extractor_settings(**values: Any) -> ExtractorSettings:
    """
    Build extractor settings from keyword arguments and environment.

    Raises:
        ConfigError: If the property name is missing or empty
    """
    return _load(ExtractorSettings, **values)


def load_delivery_settings(**values: Any) -> DeliverySettings:
    """
    Build HTTP sink settings from keyword arguments and environment.

    Raises:
        ConfigError: If the endpoint is not an absolute HTTP/HTTPS URL
            or a timeout is negative
    """
    return _load(DeliverySettings, **values)


def load_runner_settings(**values: Any) -> RunnerSettings:
    """Build sink runner settings from keyword arguments and environment."""
    return _load(RunnerSettings, **values)
