"""Pydantic models describing the data accepted by the collector.

These are optional typed contracts: the client also accepts plain mappings
and sends them as-is.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Groups = Dict[str, Union[str, List[str]]]


class SetProperties(BaseModel):
    """Property operations understood by identify calls (``$set`` etc.)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    set: Optional[Dict[str, Any]] = Field(default=None, alias="$set")
    unset: Optional[Dict[str, Any]] = Field(default=None, alias="$unset")
    set_once: Optional[Dict[str, Any]] = Field(default=None, alias="$setOnce")
    append: Optional[Dict[str, Any]] = Field(default=None, alias="$append")
    prepend: Optional[Dict[str, Any]] = Field(default=None, alias="$prepend")
    add: Optional[Dict[str, Any]] = Field(default=None, alias="$add")


class CommonProperties(BaseModel):
    model_config = ConfigDict(extra="allow")

    app_version: Optional[str] = None
    platform: Optional[str] = None
    os_name: Optional[str] = None
    os_version: Optional[str] = None
    device_brand: Optional[str] = None
    device_manufacturer: Optional[str] = None
    device_model: Optional[str] = None
    carrier: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    dma: Optional[str] = None
    language: Optional[str] = None


class _RequiresUserOrDevice(BaseModel):
    user_id: Optional[str] = None
    device_id: Optional[str] = None

    @model_validator(mode="after")
    def check_identity(self) -> "_RequiresUserOrDevice":
        if not self.user_id and not self.device_id:
            raise ValueError("either user_id or device_id is required")
        return self


class Event(CommonProperties, _RequiresUserOrDevice):
    event_type: str = Field(..., min_length=1)
    time: Optional[int] = None
    event_properties: Optional[Dict[str, Any]] = None
    user_properties: Optional[Union[SetProperties, Dict[str, Any]]] = None
    groups: Optional[Groups] = None
    price: Optional[float] = None
    quantity: Optional[int] = None
    revenue: Optional[float] = None
    productId: Optional[str] = None
    revenueType: Optional[str] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    ip: Optional[str] = None
    idfa: Optional[str] = None
    idfv: Optional[str] = None
    adid: Optional[str] = None
    android_id: Optional[str] = None
    event_id: Optional[int] = None
    session_id: Optional[int] = None
    insert_id: Optional[str] = None


class UserIdentification(CommonProperties, _RequiresUserOrDevice):
    user_properties: Optional[Union[SetProperties, Dict[str, Any]]] = None
    groups: Optional[Groups] = None
    paying: Optional[Literal["true", "false"]] = None
    start_version: Optional[str] = None


class UploadOptions(BaseModel):
    """Options forwarded alongside a batch event upload."""

    model_config = ConfigDict(extra="allow")

    min_id_length: Optional[int] = Field(default=None, ge=1)


def to_mapping(data: Any) -> Dict[str, Any]:
    """Return ``data`` as a plain dict, dumping pydantic models by alias."""
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True, exclude_none=True)
    return data


__all__ = [
    "CommonProperties",
    "Event",
    "Groups",
    "SetProperties",
    "UploadOptions",
    "UserIdentification",
    "to_mapping",
]
