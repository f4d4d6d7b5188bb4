"""Python clients for the Amplitude HTTP API."""

from __future__ import annotations

from typing import Any, Mapping, Optional

import httpx

from .config import ClientConfig
from .dispatch import AsyncRequestDispatcher, RequestDispatcher, ResponseRecord
from .payloads import build_group_identify, build_identify, build_track
from .transport import (
    AsyncDisabledTransport,
    AsyncHttpTransport,
    AsyncTransport,
    DisabledTransport,
    HttpTransport,
    Transport,
)


class AmplitudeClient:
    """Blocking client. Safe to share between threads."""

    def __init__(self, config: ClientConfig, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._config = config
        self._transport: Transport
        if config.enabled:
            self._transport = HttpTransport(config, transport=transport)
        else:
            self._transport = DisabledTransport()
        self._dispatcher = RequestDispatcher(config, self._transport)

    def __enter__(self) -> "AmplitudeClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def config(self) -> ClientConfig:
        return self._config

    def track(
        self,
        event: Any,
        request_options: Optional[Mapping[str, Any]] = None,
        options: Any = None,
    ) -> ResponseRecord:
        """Upload a single event.

        ``event`` needs ``event_type`` plus ``user_id`` or ``device_id``. When it
        is a dict it is updated in place with ``time``, ``app_version`` and
        ``insert_id`` as configured. ``request_options`` may carry ``headers``,
        ``timeout`` (seconds) and ``extensions`` for the HTTP request;
        ``options`` is forwarded to the batch API (e.g. ``min_id_length``).
        """
        spec, payload = build_track(self._config, event, request_options, options)
        return self._dispatcher.dispatch(spec, payload)

    def identify(self, identification: Any, request_options: Optional[Mapping[str, Any]] = None) -> ResponseRecord:
        spec, payload = build_identify(self._config, identification, request_options)
        return self._dispatcher.dispatch(spec, payload)

    def group_identify(
        self,
        group_type: str,
        group_value: str,
        group_properties: Any,
        request_options: Optional[Mapping[str, Any]] = None,
    ) -> ResponseRecord:
        spec, payload = build_group_identify(
            self._config, group_type, group_value, group_properties, request_options
        )
        return self._dispatcher.dispatch(spec, payload)

    def close(self) -> None:
        self._transport.close()


class AsyncAmplitudeClient:
    """asyncio counterpart of :class:`AmplitudeClient`."""

    def __init__(self, config: ClientConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._config = config
        self._transport: AsyncTransport
        if config.enabled:
            self._transport = AsyncHttpTransport(config, transport=transport)
        else:
            self._transport = AsyncDisabledTransport()
        self._dispatcher = AsyncRequestDispatcher(config, self._transport)

    async def __aenter__(self) -> "AsyncAmplitudeClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def track(
        self,
        event: Any,
        request_options: Optional[Mapping[str, Any]] = None,
        options: Any = None,
    ) -> ResponseRecord:
        spec, payload = build_track(self._config, event, request_options, options)
        return await self._dispatcher.dispatch(spec, payload)

    async def identify(
        self, identification: Any, request_options: Optional[Mapping[str, Any]] = None
    ) -> ResponseRecord:
        spec, payload = build_identify(self._config, identification, request_options)
        return await self._dispatcher.dispatch(spec, payload)

    async def group_identify(
        self,
        group_type: str,
        group_value: str,
        group_properties: Any,
        request_options: Optional[Mapping[str, Any]] = None,
    ) -> ResponseRecord:
        spec, payload = build_group_identify(
            self._config, group_type, group_value, group_properties, request_options
        )
        return await self._dispatcher.dispatch(spec, payload)

    async def aclose(self) -> None:
        await self._transport.aclose()


__all__ = ["AmplitudeClient", "AsyncAmplitudeClient"]
