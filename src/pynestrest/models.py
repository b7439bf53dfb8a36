"""Data models for Nest API requests, stream events and shared resource plumbing."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from datetime import datetime

    from pynestrest.api import NestAPI
    from pynestrest.structures import Structure


__all__ = [
    "ETA",
    "NestResource",
    "StructuresEvent",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ETA:
    """Estimated arrival submitted to a structure.

    Attributes:
        trip_id: Caller-chosen identifier of the trip.
        estimated_arrival_window_begin: Earliest expected arrival time.
        estimated_arrival_window_end: Latest expected arrival time.
    """

    trip_id: str
    estimated_arrival_window_begin: datetime
    estimated_arrival_window_end: datetime


@dataclass
class StructuresEvent:
    """A decoded record from the structures event stream.

    Attributes:
        data: Mapping of structure ID to structure, or None when the
            record carried no structures (e.g. keep-alives).
    """

    data: dict[str, Structure] | None = None


class NestResource:
    """Update plumbing shared by Thermostat and Structure.

    Subclasses are dataclasses with ``api`` and ``raw_data`` fields; they
    provide ``resource_id`` and ``_put`` for their endpoint.
    """

    api: NestAPI | None
    raw_data: dict[str, Any]

    @property
    def resource_id(self) -> str:
        """Get the identifier used in this resource's URL."""
        raise NotImplementedError

    async def _put(self, api: NestAPI, body: dict[str, Any]) -> Any:
        raise NotImplementedError

    def _require_api(self) -> NestAPI:
        if self.api is None:
            msg = f"{type(self).__name__} {self.resource_id} is not bound to a NestAPI"
            raise RuntimeError(msg)
        return self.api

    async def _update(self, body: dict[str, Any]) -> None:
        """Send a patch for this resource and merge the accepted values."""
        data = await self._put(self._require_api(), body)
        self._apply_update(body)
        if isinstance(data, dict):
            self._apply_update(data)
        _LOGGER.debug("Updated %s %s: %s", type(self).__name__, self.resource_id, body)

    def _apply_update(self, data: dict[str, Any]) -> None:
        known = {f.name for f in fields(self)} - {"raw_data", "api"}  # type: ignore[arg-type]
        for key, value in data.items():
            if key in known:
                setattr(self, key, value)
        self.raw_data.update(data)
