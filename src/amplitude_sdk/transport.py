"""Transport strategies used by the request dispatcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional

import httpx

from .config import ClientConfig

if TYPE_CHECKING:
    from .dispatch import RequestAttempt


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)
    succeeded: bool = False


def _from_httpx(response: httpx.Response) -> RawResponse:
    return RawResponse(
        status_code=response.status_code,
        body=response.content,
        headers=dict(response.headers),
        succeeded=response.status_code == 200,
    )


def _build_request(client: httpx.Client | httpx.AsyncClient, attempt: "RequestAttempt") -> httpx.Request:
    return client.build_request(
        attempt.method,
        attempt.url,
        content=attempt.content,
        headers=attempt.headers,
        timeout=attempt.timeout,
        extensions=dict(attempt.extensions) or None,
    )


class Transport:
    def send(self, attempt: "RequestAttempt") -> RawResponse:  # pragma: no cover - interface
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover - optional override
        return None


class AsyncTransport:
    async def send(self, attempt: "RequestAttempt") -> RawResponse:  # pragma: no cover - interface
        raise NotImplementedError

    async def aclose(self) -> None:  # pragma: no cover - optional override
        return None


class DisabledTransport(Transport):
    """Answers every attempt with a synthetic success and never touches the network."""

    def send(self, attempt: "RequestAttempt") -> RawResponse:
        return RawResponse(status_code=0, succeeded=True)


class AsyncDisabledTransport(AsyncTransport):
    async def send(self, attempt: "RequestAttempt") -> RawResponse:
        return RawResponse(status_code=0, succeeded=True)


class HttpTransport(Transport):
    def __init__(self, config: ClientConfig, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        self._client = httpx.Client(verify=config.verify, transport=transport)

    def send(self, attempt: "RequestAttempt") -> RawResponse:
        # send() without stream=True drains the body before returning.
        response = self._client.send(_build_request(self._client, attempt))
        return _from_httpx(response)

    def close(self) -> None:
        self._client.close()


class AsyncHttpTransport(AsyncTransport):
    def __init__(self, config: ClientConfig, *, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._client = httpx.AsyncClient(verify=config.verify, transport=transport)

    async def send(self, attempt: "RequestAttempt") -> RawResponse:
        response = await self._client.send(_build_request(self._client, attempt))
        return _from_httpx(response)

    async def aclose(self) -> None:
        await self._client.aclose()


__all__ = [
    "AsyncDisabledTransport",
    "AsyncHttpTransport",
    "AsyncTransport",
    "DisabledTransport",
    "HttpTransport",
    "RawResponse",
    "Transport",
]
