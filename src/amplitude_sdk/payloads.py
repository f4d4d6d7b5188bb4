"""Builders turning track / identify / group identify calls into requests."""

from __future__ import annotations

import json
import random
import time
from typing import Any, Dict, Mapping, Optional, Tuple

from .config import ClientConfig
from .dispatch import FORM_CONTENT_TYPE, JSON_CONTENT_TYPE, RequestSpec
from .errors import ConfigurationError
from .models import to_mapping

TRACK_PATH = "/2/httpapi"
LEGACY_TRACK_PATH = "/httpapi"
IDENTIFY_PATH = "/identify"
GROUP_IDENTIFY_PATH = "/groupidentify"

Built = Tuple[RequestSpec, Dict[str, Any]]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _dumps(data: Any) -> str:
    return json.dumps(data, separators=(",", ":"))


def generate_insert_id() -> str:
    """``<epoch-ms>_<16 random digits>``; the suffix keeps same-millisecond ids apart."""
    return f"{_now_ms()}_{random.randrange(10 ** 16):016d}"


def build_track(
    config: ClientConfig,
    event: Any,
    request_options: Optional[Mapping[str, Any]] = None,
    options: Any = None,
) -> Built:
    """Stamp defaults onto ``event`` (in place) and wrap it for upload."""
    event = to_mapping(event)
    if config.set_time:
        event["time"] = _now_ms()
    if config.app_version:
        event["app_version"] = config.app_version
    if not event.get("insert_id"):
        event["insert_id"] = generate_insert_id()

    if config.legacy_event_api:
        if options is not None:
            raise ConfigurationError("upload options are only supported by the batch event API")
        payload = {"api_key": config.api_key, "event": _dumps(event)}
        return RequestSpec(LEGACY_TRACK_PATH, FORM_CONTENT_TYPE, request_options or {}), payload

    payload = {"api_key": config.api_key, "events": [event]}
    if options is not None:
        payload["options"] = to_mapping(options)
    return RequestSpec(TRACK_PATH, JSON_CONTENT_TYPE, request_options or {}), payload


def build_identify(
    config: ClientConfig,
    identification: Any,
    request_options: Optional[Mapping[str, Any]] = None,
) -> Built:
    payload = {
        "api_key": config.api_key,
        "identification": _dumps(to_mapping(identification)),
    }
    return RequestSpec(IDENTIFY_PATH, FORM_CONTENT_TYPE, request_options or {}), payload


def build_group_identify(
    config: ClientConfig,
    group_type: str,
    group_value: str,
    group_properties: Any,
    request_options: Optional[Mapping[str, Any]] = None,
) -> Built:
    identification = {
        "group_type": group_type,
        "group_value": group_value,
        "group_properties": to_mapping(group_properties),
    }
    payload = {"api_key": config.api_key, "identification": _dumps(identification)}
    return RequestSpec(GROUP_IDENTIFY_PATH, FORM_CONTENT_TYPE, request_options or {}), payload


__all__ = [
    "GROUP_IDENTIFY_PATH",
    "IDENTIFY_PATH",
    "LEGACY_TRACK_PATH",
    "TRACK_PATH",
    "build_group_identify",
    "build_identify",
    "build_track",
    "generate_insert_id",
]
