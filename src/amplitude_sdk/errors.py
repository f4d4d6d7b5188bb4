"""Exceptions raised by the Amplitude SDK.

Transport failures are not listed here: they surface as the underlying
``httpx.TransportError`` so callers can tell network problems apart from
API responses.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .dispatch import ResponseRecord


class AmplitudeError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(AmplitudeError, ValueError):
    """Programmer error detected before any network I/O. Never retried."""


class AmplitudeApiError(AmplitudeError):
    """The collector answered with a non-200 status and no retry is left."""

    def __init__(self, message: str, response: "ResponseRecord") -> None:
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def retry_count(self) -> int:
        return self.response.retry_count


__all__ = ["AmplitudeApiError", "AmplitudeError", "ConfigurationError"]
