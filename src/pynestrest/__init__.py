"""Python client library for the Nest REST API.

This package provides an async client for Nest structures (homes) and
thermostats, including the server-push event stream for structure changes.

The library is organized into three layers:
1. **API Layer** (pynestrest.api): Low-level HTTP communication, redirect handling
2. **Client Layer** (pynestrest.client): Collection fetches and streams
3. **Resource Layer** (pynestrest.devices, pynestrest.structures): Resource objects with validated setters

Example:
    Basic usage:

    ```python
    from pynestrest import HvacMode, NestClient

    async with NestClient(token="c.abc123") as client:
        thermostats = await client.get_thermostats()

        for thermostat in thermostats.values():
            await thermostat.set_hvac_mode(HvacMode.HEAT)
            await thermostat.set_target_temperature_f(68)
    ```

    Streaming structure changes:

    ```python
    from pynestrest import NestClient

    def on_structures(structures, error):
        if error is not None:
            print(f"Connection failed: {error.kind}")
            return
        for structure_id, structure in structures.items():
            print(f"{structure_id}: {structure.away}")

    async with NestClient(token="c.abc123") as client:
        stream = client.structures_stream(on_structures)
        stream.start()
        ...
        await stream.stop()
    ```
"""

from __future__ import annotations

from pynestrest.api import NestAPI
from pynestrest.client import NestClient
from pynestrest.const import AwayMode, HvacMode
from pynestrest.devices import Thermostat
from pynestrest.exceptions import APIError, InvalidParameterError, NestError
from pynestrest.models import ETA, StructuresEvent
from pynestrest.serializers import (
    deserialize_structure,
    deserialize_structures,
    deserialize_thermostat,
    deserialize_thermostats,
)
from pynestrest.stream import ReconnectBackoff, StreamState, StructuresStream, parse_stream_data
from pynestrest.structures import Structure


__version__ = "0.1.0"

__all__ = [
    "ETA",
    "APIError",
    "AwayMode",
    "HvacMode",
    "InvalidParameterError",
    "NestAPI",
    "NestClient",
    "NestError",
    "ReconnectBackoff",
    "StreamState",
    "Structure",
    "StructuresEvent",
    "StructuresStream",
    "Thermostat",
    "__version__",
    "deserialize_structure",
    "deserialize_structures",
    "deserialize_thermostat",
    "deserialize_thermostats",
    "parse_stream_data",
]
