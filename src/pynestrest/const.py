"""Constants for pynestrest library."""

from __future__ import annotations

from enum import IntEnum


# API Configuration
DEFAULT_API_URL = "https://developer-api.nest.com"
DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_STREAM_READ_TIMEOUT = 90  # seconds, server sends keep-alives every ~30s

# Endpoints
STRUCTURES_PATH = "/structures"
THERMOSTATS_PATH = "/devices/thermostats"
STRUCTURES_COLLECTION_PATH = "/structures.json"
THERMOSTATS_COLLECTION_PATH = "/devices/thermostats.json"
ETA_SUFFIX = "/eta.json"

# Event stream
STREAM_CONTENT_TYPE = "text/event-stream"
STREAM_DATA_PREFIX = "data:"

# Reconnect backoff for the event stream
DEFAULT_RECONNECT_BASE_DELAY = 1.0
DEFAULT_RECONNECT_MAX_DELAY = 60.0

# Parameter Validation
TARGET_TEMP_C_MIN = 9
TARGET_TEMP_C_MAX = 32
TARGET_TEMP_F_MIN = 50
TARGET_TEMP_F_MAX = 90

# Error kinds
ERROR_API = "api_error"
ERROR_HTTP = "http_error"
ERROR_DEVICES = "devices_error"
ERROR_BODY_READ = "body_read_error"
ERROR_ETA = "eta_error"


class HvacMode(IntEnum):
    """Thermostat HVAC modes."""

    COOL = 0
    HEAT = 1
    HEAT_COOL = 2
    OFF = 3


class AwayMode(IntEnum):
    """Structure away states."""

    HOME = 0
    AWAY = 1
    AUTO_AWAY = 2


HVAC_MODE_VALUES: dict[int, str] = {
    HvacMode.COOL: "cool",
    HvacMode.HEAT: "heat",
    HvacMode.HEAT_COOL: "heat-cool",
    HvacMode.OFF: "off",
}

AWAY_MODE_VALUES: dict[int, str] = {
    AwayMode.HOME: "home",
    AwayMode.AWAY: "away",
    AwayMode.AUTO_AWAY: "auto-away",
}
