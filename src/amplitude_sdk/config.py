"""Configuration objects for the Amplitude Python SDK."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Union

from .log import LogSink

DEFAULT_ENDPOINT = "https://api.amplitude.com"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    enabled: bool = True
    app_version: Optional[str] = None
    set_time: bool = False
    max_retries: int = 2
    timeout_ms: int = 5000
    endpoint: str = DEFAULT_ENDPOINT
    legacy_event_api: bool = False
    verify: Union[bool, str] = True
    user_agent: str = "amplitude-sdk-python/0.1.0"
    log_sink: Optional[LogSink] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("api_key must be a non-empty string")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be > 0, got {self.timeout_ms}")

    @property
    def timeout(self) -> float:
        """Per-attempt timeout in seconds, as httpx expects it."""
        return self.timeout_ms / 1000.0

    @classmethod
    def from_env(cls, log_sink: Optional[LogSink] = None) -> "ClientConfig":
        api_key = os.environ.get("AMPLITUDE_API_KEY")
        if not api_key:
            raise ValueError("AMPLITUDE_API_KEY must be configured")

        return cls(
            api_key=api_key,
            enabled=_env_flag("AMPLITUDE_ENABLED", True),
            app_version=os.environ.get("AMPLITUDE_APP_VERSION") or None,
            set_time=_env_flag("AMPLITUDE_SET_TIME", False),
            max_retries=int(os.environ.get("AMPLITUDE_MAX_RETRIES", "2")),
            timeout_ms=int(os.environ.get("AMPLITUDE_TIMEOUT_MS", "5000")),
            endpoint=os.environ.get("AMPLITUDE_ENDPOINT") or DEFAULT_ENDPOINT,
            legacy_event_api=_env_flag("AMPLITUDE_LEGACY_EVENT_API", False),
            log_sink=log_sink,
        )


__all__ = ["ClientConfig", "DEFAULT_ENDPOINT"]
