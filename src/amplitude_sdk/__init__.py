"""Amplitude HTTP API client for Python."""

from .client import AmplitudeClient, AsyncAmplitudeClient
from .config import ClientConfig
from .dispatch import RETRYABLE_STATUS_CODES, ResponseRecord
from .errors import AmplitudeApiError, AmplitudeError, ConfigurationError
from .models import Event, SetProperties, UploadOptions, UserIdentification

__version__ = "0.1.0"

__all__ = [
    "AmplitudeApiError",
    "AmplitudeClient",
    "AmplitudeError",
    "AsyncAmplitudeClient",
    "ClientConfig",
    "ConfigurationError",
    "Event",
    "RETRYABLE_STATUS_CODES",
    "ResponseRecord",
    "SetProperties",
    "UploadOptions",
    "UserIdentification",
    "__version__",
]
