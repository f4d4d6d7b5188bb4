from __future__ import annotations

import json
from unittest import mock

import pytest

from amplitude_sdk.config import ClientConfig
from amplitude_sdk.dispatch import FORM_CONTENT_TYPE, JSON_CONTENT_TYPE
from amplitude_sdk.errors import ConfigurationError
from amplitude_sdk.payloads import (
    build_group_identify,
    build_identify,
    build_track,
    generate_insert_id,
)


def test_insert_id_format() -> None:
    with mock.patch("amplitude_sdk.payloads.time.time", return_value=1700000000.25):
        insert_id = generate_insert_id()
    ms, digits = insert_id.split("_")
    assert ms == "1700000000250"
    assert len(digits) == 16 and digits.isdigit()


def test_same_millisecond_insert_ids_differ() -> None:
    with mock.patch("amplitude_sdk.payloads.time.time", return_value=1700000000.0):
        ids = {generate_insert_id() for _ in range(100)}
    assert len(ids) == 100


def test_build_track_batch_protocol() -> None:
    cfg = ClientConfig(api_key="key")
    event = {"event_type": "e", "user_id": "u", "insert_id": ""}
    spec, payload = build_track(cfg, event, {"timeout": 1})

    assert spec.path == "/2/httpapi"
    assert spec.content_type == JSON_CONTENT_TYPE
    assert spec.overrides == {"timeout": 1}
    assert payload == {"api_key": "key", "events": [event]}
    assert event["insert_id"]


def test_build_track_stamps_configured_fields() -> None:
    cfg = ClientConfig(api_key="key", set_time=True, app_version="2.0")
    event = {"event_type": "e", "user_id": "u", "time": 5, "app_version": "1.0"}
    with mock.patch("amplitude_sdk.payloads.time.time", return_value=1700000000.5):
        build_track(cfg, event)
    assert event["time"] == 1700000000500
    assert event["app_version"] == "2.0"


def test_build_track_legacy_protocol() -> None:
    cfg = ClientConfig(api_key="key", legacy_event_api=True)
    event = {"event_type": "e", "device_id": "d"}
    spec, payload = build_track(cfg, event)

    assert spec.path == "/httpapi"
    assert spec.content_type == FORM_CONTENT_TYPE
    assert set(payload) == {"api_key", "event"}
    assert json.loads(payload["event"]) == event


def test_legacy_protocol_rejects_upload_options() -> None:
    cfg = ClientConfig(api_key="key", legacy_event_api=True)
    with pytest.raises(ConfigurationError):
        build_track(cfg, {"event_type": "e", "user_id": "u"}, options={"min_id_length": 1})


def test_build_identify_does_not_mutate() -> None:
    identification = {"user_id": "u", "user_properties": {"$set": {"plan": "pro"}}}
    spec, payload = build_identify(ClientConfig(api_key="key"), identification)

    assert spec.path == "/identify"
    assert spec.content_type == FORM_CONTENT_TYPE
    assert payload["identification"] == '{"user_id":"u","user_properties":{"$set":{"plan":"pro"}}}'
    assert identification == {"user_id": "u", "user_properties": {"$set": {"plan": "pro"}}}


def test_build_group_identify() -> None:
    spec, payload = build_group_identify(ClientConfig(api_key="key"), "team id", "12345", {"hello": "world"})
    assert spec.path == "/groupidentify"
    assert payload == {
        "api_key": "key",
        "identification": '{"group_type":"team id","group_value":"12345","group_properties":{"hello":"world"}}',
    }
