"""Request dispatch for the Amplitude collector.

A dispatch encodes one payload into a :class:`RequestAttempt`, sends it
through a transport and classifies the outcome:

* a successful response ends the dispatch and is returned;
* a 500/502/503/504 response is retried immediately with the identical
  attempt while ``retry_count < max_retries``;
* anything else raises :class:`~amplitude_sdk.errors.AmplitudeApiError`.

Transport errors are logged and re-raised untouched. Disabled clients plug in
a transport that never touches the network, so the loop below is the same in
both modes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode

import httpx

from .config import ClientConfig
from .errors import AmplitudeApiError, ConfigurationError
from .log import DispatchLog
from .transport import AsyncTransport, RawResponse, Transport

logger = logging.getLogger("amplitude_sdk.dispatch")

RETRYABLE_STATUS_CODES = frozenset({500, 502, 503, 504})

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
JSON_CONTENT_TYPE = "application/json"

ALLOWED_OVERRIDES = frozenset({"headers", "timeout", "extensions"})
_PROTECTED_HEADERS = frozenset({"content-type", "content-length"})


@dataclass(frozen=True)
class RequestSpec:
    path: str
    content_type: str
    overrides: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RequestAttempt:
    method: str
    url: str
    headers: Dict[str, str]
    content: bytes
    timeout: float
    extensions: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResponseRecord:
    status_code: int
    body: bytes
    response_headers: Dict[str, str]
    start: datetime
    end: datetime
    succeeded: bool
    retry_count: int
    request_data: Dict[str, Any]
    request: RequestAttempt

    @property
    def url(self) -> str:
        return self.request.url

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @property
    def elapsed_ms(self) -> int:
        return int((self.end - self.start).total_seconds() * 1000)


def encode_body(content_type: str, payload: Mapping[str, Any]) -> bytes:
    if content_type == FORM_CONTENT_TYPE:
        # Spaces become %20 and "/" becomes %2F.
        return urlencode(payload, quote_via=quote).encode("utf-8")
    if content_type == JSON_CONTENT_TYPE:
        return json.dumps(payload, separators=(",", ":")).encode("utf-8")
    raise ConfigurationError(f'Unknown Content-Type header: "{content_type}"')


def resolve_url(endpoint: str, path: str) -> str:
    """Join the scheme, host and port of ``endpoint`` with ``path``."""
    try:
        url = httpx.URL(endpoint)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"Invalid endpoint {endpoint!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(f"Endpoint must be an http(s) URL, got {endpoint!r}")

    host = url.host
    if ":" in host:
        host = f"[{host}]"
    port = f":{url.port}" if url.port is not None else ""
    return f"{url.scheme}://{host}{port}{path}"


def _merge_headers(base: Dict[str, str], extra: Optional[Mapping[str, str]]) -> Dict[str, str]:
    merged = dict(base)
    for name, value in (extra or {}).items():
        if name.lower() in _PROTECTED_HEADERS:
            continue
        for existing in [key for key in merged if key.lower() == name.lower()]:
            del merged[existing]
        merged[name] = value
    return merged


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _DispatcherBase:
    def __init__(self, config: ClientConfig) -> None:
        self._config = config
        self._log = DispatchLog(logger, config.log_sink)

    def prepare(self, spec: RequestSpec, payload: Mapping[str, Any]) -> RequestAttempt:
        """Build the attempt that every try of this dispatch will send."""
        unknown = set(spec.overrides) - ALLOWED_OVERRIDES
        if unknown:
            raise ConfigurationError(
                f"Unsupported request options {sorted(unknown)}; allowed: {sorted(ALLOWED_OVERRIDES)}"
            )

        url = resolve_url(self._config.endpoint, spec.path)
        content = encode_body(spec.content_type, payload)

        headers = _merge_headers({"User-Agent": self._config.user_agent}, spec.overrides.get("headers"))
        headers["Content-Type"] = spec.content_type
        headers["Content-Length"] = str(len(content))

        timeout = spec.overrides.get("timeout")
        return RequestAttempt(
            method="POST",
            url=url,
            headers=headers,
            content=content,
            timeout=self._config.timeout if timeout is None else timeout,
            extensions=dict(spec.overrides.get("extensions") or {}),
        )

    def _sending(self, attempt: RequestAttempt) -> None:
        self._log.debug(f"sending request to Amplitude API {attempt.url} ({len(attempt.content)} bytes)")

    def _transport_failed(self, attempt: RequestAttempt, exc: Exception, retry_count: int) -> None:
        self._log.error(
            f"Amplitude API call to {attempt.url} failed after {retry_count} retries: {exc!r}"
        )

    def _record(
        self,
        attempt: RequestAttempt,
        payload: Mapping[str, Any],
        raw: RawResponse,
        start: datetime,
        end: datetime,
        retry_count: int,
    ) -> ResponseRecord:
        return ResponseRecord(
            status_code=raw.status_code,
            body=raw.body,
            response_headers=dict(raw.headers),
            start=start,
            end=end,
            succeeded=raw.succeeded,
            retry_count=retry_count,
            request_data=dict(payload),
            request=attempt,
        )

    def _should_retry(self, record: ResponseRecord) -> bool:
        if record.succeeded:
            return False
        if record.status_code not in RETRYABLE_STATUS_CODES:
            return False
        if record.retry_count >= self._config.max_retries:
            return False
        self._log.warn(
            f"retrying Amplitude request to {record.url} "
            f"(status code: {record.status_code}, retries: {record.retry_count})"
        )
        return True

    def _settle(self, record: ResponseRecord) -> ResponseRecord:
        if record.succeeded:
            self._log.info(
                f"successful Amplitude API call to {record.url} "
                f"after {record.retry_count} retries ({record.elapsed_ms}ms)"
            )
            return record

        message = (
            f"Amplitude API call to {record.url} failed with "
            f"status {record.status_code} after {record.retry_count} retries"
        )
        self._log.error(f"{message} ({record.elapsed_ms}ms)")
        raise AmplitudeApiError(message, record)


class RequestDispatcher(_DispatcherBase):
    def __init__(self, config: ClientConfig, transport: Transport) -> None:
        super().__init__(config)
        self._transport = transport

    def dispatch(self, spec: RequestSpec, payload: Mapping[str, Any]) -> ResponseRecord:
        attempt = self.prepare(spec, payload)
        retry_count = 0
        while True:
            self._sending(attempt)
            start = _now()
            try:
                raw = self._transport.send(attempt)
            except httpx.TransportError as exc:
                self._transport_failed(attempt, exc, retry_count)
                raise
            record = self._record(attempt, payload, raw, start, _now(), retry_count)
            if not self._should_retry(record):
                return self._settle(record)
            retry_count += 1


class AsyncRequestDispatcher(_DispatcherBase):
    def __init__(self, config: ClientConfig, transport: AsyncTransport) -> None:
        super().__init__(config)
        self._transport = transport

    async def dispatch(self, spec: RequestSpec, payload: Mapping[str, Any]) -> ResponseRecord:
        attempt = self.prepare(spec, payload)
        retry_count = 0
        while True:
            self._sending(attempt)
            start = _now()
            try:
                raw = await self._transport.send(attempt)
            except httpx.TransportError as exc:
                self._transport_failed(attempt, exc, retry_count)
                raise
            record = self._record(attempt, payload, raw, start, _now(), retry_count)
            if not self._should_retry(record):
                return self._settle(record)
            retry_count += 1


__all__ = [
    "ALLOWED_OVERRIDES",
    "AsyncRequestDispatcher",
    "FORM_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "RETRYABLE_STATUS_CODES",
    "RequestAttempt",
    "RequestDispatcher",
    "RequestSpec",
    "ResponseRecord",
    "encode_body",
    "resolve_url",
]
