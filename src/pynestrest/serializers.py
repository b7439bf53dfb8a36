"""Serialization and deserialization of API payloads.

This module provides stateless functions for converting between raw API
payloads and typed models, plus the two error-translation functions used by
the update and collection paths.

Design Philosophy:
    - Stateless functions (no classes, no state)
    - Every decoded Thermostat/Structure gets its NestAPI back-reference here
    - Update errors carry the HTTP status, collection errors keep the server record as-is
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pynestrest.const import ERROR_API
from pynestrest.devices import Thermostat
from pynestrest.exceptions import APIError
from pynestrest.models import StructuresEvent
from pynestrest.structures import Structure


if TYPE_CHECKING:
    from pynestrest.api import NestAPI
    from pynestrest.models import ETA


__all__ = [
    "api_error_from_collection_response",
    "api_error_from_update_response",
    "deserialize_structure",
    "deserialize_structures",
    "deserialize_structures_event",
    "deserialize_thermostat",
    "deserialize_thermostats",
    "format_timestamp",
    "serialize_eta",
]


# -------------------------------------------------------------------------
# Resources
# -------------------------------------------------------------------------


def deserialize_thermostat(device_id: str, data: dict[str, Any], api: NestAPI | None = None) -> Thermostat:
    """Deserialize a thermostat payload.

    Args:
        device_id: Key the payload was found under; used when the payload
            has no "device_id" of its own.
        data: Raw thermostat attributes.
        api: NestAPI to attach as back-reference.

    Returns:
        Thermostat instance.
    """
    return Thermostat(
        device_id=data.get("device_id") or device_id,
        name=data.get("name"),
        name_long=data.get("name_long"),
        structure_id=data.get("structure_id"),
        where_id=data.get("where_id"),
        locale=data.get("locale"),
        software_version=data.get("software_version"),
        is_online=data.get("is_online"),
        last_connection=data.get("last_connection"),
        can_cool=data.get("can_cool"),
        can_heat=data.get("can_heat"),
        is_using_emergency_heat=data.get("is_using_emergency_heat"),
        has_fan=data.get("has_fan"),
        has_leaf=data.get("has_leaf"),
        fan_timer_active=data.get("fan_timer_active"),
        fan_timer_timeout=data.get("fan_timer_timeout"),
        temperature_scale=data.get("temperature_scale"),
        hvac_mode=data.get("hvac_mode"),
        hvac_state=data.get("hvac_state"),
        target_temperature_c=data.get("target_temperature_c"),
        target_temperature_f=data.get("target_temperature_f"),
        target_temperature_high_c=data.get("target_temperature_high_c"),
        target_temperature_low_c=data.get("target_temperature_low_c"),
        target_temperature_high_f=data.get("target_temperature_high_f"),
        target_temperature_low_f=data.get("target_temperature_low_f"),
        ambient_temperature_c=data.get("ambient_temperature_c"),
        ambient_temperature_f=data.get("ambient_temperature_f"),
        humidity=data.get("humidity"),
        raw_data=dict(data),
        api=api,
    )


def deserialize_structure(structure_id: str, data: dict[str, Any], api: NestAPI | None = None) -> Structure:
    """Deserialize a structure payload.

    Args:
        structure_id: Key the payload was found under; used when the payload
            has no "structure_id" of its own.
        data: Raw structure attributes.
        api: NestAPI to attach as back-reference.

    Returns:
        Structure instance.

    Example:
        >>> structure = deserialize_structure("structure1", {"away": "home"})
        >>> structure.away
        'home'
    """
    return Structure(
        structure_id=data.get("structure_id") or structure_id,
        name=data.get("name"),
        away=data.get("away"),
        thermostats=list(data.get("thermostats") or []),
        smoke_co_alarms=list(data.get("smoke_co_alarms") or []),
        country_code=data.get("country_code"),
        postal_code=data.get("postal_code"),
        time_zone=data.get("time_zone"),
        peak_period_start_time=data.get("peak_period_start_time"),
        peak_period_end_time=data.get("peak_period_end_time"),
        eta=data.get("eta"),
        raw_data=dict(data),
        api=api,
    )


def deserialize_thermostats(data: dict[str, Any], api: NestAPI | None = None) -> dict[str, Thermostat]:
    """Deserialize a device ID -> thermostat mapping.

    Entries that are not JSON objects are skipped.
    """
    return {
        device_id: deserialize_thermostat(device_id, value, api)
        for device_id, value in data.items()
        if isinstance(value, dict)
    }


def deserialize_structures(data: dict[str, Any], api: NestAPI | None = None) -> dict[str, Structure]:
    """Deserialize a structure ID -> structure mapping.

    Entries that are not JSON objects are skipped.
    """
    return {
        structure_id: deserialize_structure(structure_id, value, api)
        for structure_id, value in data.items()
        if isinstance(value, dict)
    }


def deserialize_structures_event(payload: Any, api: NestAPI | None = None) -> StructuresEvent:
    """Deserialize a decoded event-stream record.

    Records look like ``{"path": "/", "data": {<structure_id>: {...}}}``.
    Anything else (``null`` keep-alives, records without a mapping under
    "data") yields an event whose ``data`` is None.
    """
    if not isinstance(payload, dict):
        return StructuresEvent()

    data = payload.get("data")
    if not isinstance(data, dict):
        return StructuresEvent()

    return StructuresEvent(data=deserialize_structures(data, api))


# -------------------------------------------------------------------------
# Requests
# -------------------------------------------------------------------------


def format_timestamp(value: datetime) -> str:
    """Format a datetime as an RFC 3339 UTC timestamp.

    Naive datetimes are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def serialize_eta(eta: ETA) -> dict[str, str]:
    """Serialize an ETA into the request body for the eta endpoint."""
    return {
        "trip_id": eta.trip_id,
        "estimated_arrival_window_begin": format_timestamp(eta.estimated_arrival_window_begin),
        "estimated_arrival_window_end": format_timestamp(eta.estimated_arrival_window_end),
    }


# -------------------------------------------------------------------------
# Errors
# -------------------------------------------------------------------------


def api_error_from_update_response(status_code: int, reason: str | None, data: Any) -> APIError:
    """Translate a failed PUT response into an APIError.

    The server's error string becomes the description of an ``api_error`` and
    the HTTP status line and code are attached.

    Args:
        status_code: HTTP status of the response.
        reason: HTTP reason phrase of the response.
        data: Decoded response body (may be None or non-dict).

    Returns:
        APIError describing the failure.
    """
    body = data if isinstance(data, dict) else {}
    description = body.get("error") or body.get("message") or ""
    status = f"{status_code} {reason}" if reason else str(status_code)
    return APIError(str(description), kind=ERROR_API, status=status, status_code=status_code)


def api_error_from_collection_response(data: Any) -> APIError:
    """Translate a failed collection GET response into an APIError.

    The server's error record is returned as-is: its "error" field becomes
    the kind and no HTTP status is attached.

    Args:
        data: Decoded response body (may be None or non-dict).

    Returns:
        APIError describing the failure.
    """
    body = data if isinstance(data, dict) else {}
    kind = body.get("error") or ERROR_API
    description = body.get("message") or body.get("error_description") or ""
    return APIError(str(description), kind=str(kind))
