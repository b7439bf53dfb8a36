"""Structure (home) resource objects."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from pynestrest.const import AWAY_MODE_VALUES, ERROR_ETA, AwayMode
from pynestrest.exceptions import APIError, InvalidParameterError
from pynestrest.models import ETA, NestResource


if TYPE_CHECKING:
    from pynestrest.api import NestAPI

_LOGGER = logging.getLogger(__name__)


def check_eta_window(begin: datetime, end: datetime, *, now: datetime | None = None) -> None:
    """Validate an ETA arrival window.

    Naive datetimes are treated as UTC.

    Args:
        begin: Start of the arrival window, must be after now.
        end: End of the arrival window, must be after begin.
        now: Reference time (defaults to the current time).

    Raises:
        APIError: With kind ``eta_error`` if the window is invalid.
    """
    now = _as_utc(now or datetime.now(UTC))
    if _as_utc(begin) <= now:
        msg = "The begin time must be greater than the time now"
        raise APIError(msg, kind=ERROR_ETA)
    if _as_utc(end) <= _as_utc(begin):
        msg = "The end time must be greater than the begin time"
        raise APIError(msg, kind=ERROR_ETA)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass
class Structure(NestResource):
    """A Nest structure (home) grouping devices.

    Attributes:
        structure_id: Unique structure identifier.
        away: Away state ("home", "away" or "auto-away").
        thermostats: IDs of thermostats in this structure.
        raw_data: Full decoded payload, including attributes without a field.
        api: NestAPI that produced this structure (used by setters).
    """

    structure_id: str
    name: str | None = None
    away: str | None = None
    thermostats: list[str] = field(default_factory=list)
    smoke_co_alarms: list[str] = field(default_factory=list)
    country_code: str | None = None
    postal_code: str | None = None
    time_zone: str | None = None
    peak_period_start_time: str | None = None
    peak_period_end_time: str | None = None
    eta: dict[str, Any] | None = None
    raw_data: dict[str, Any] = field(default_factory=dict, repr=False)
    api: NestAPI | None = field(default=None, repr=False, compare=False)

    async def set_away(self, mode: AwayMode | int) -> None:
        """Set the away state of the structure.

        Args:
            mode: One of AwayMode.HOME, AWAY or AUTO_AWAY.

        Raises:
            InvalidParameterError: If mode is not a recognized away state.
            APIError: If the update fails.
        """
        value = AWAY_MODE_VALUES.get(mode) if isinstance(mode, int) and not isinstance(mode, bool) else None
        if value is None:
            msg = "Invalid Away requested - must be home, away or auto-away"
            raise InvalidParameterError(msg, parameter_name="away", value=mode)

        await self._update({"away": value})

    async def set_eta(self, trip_id: str, begin: datetime, end: datetime) -> None:
        """Submit an estimated arrival window so the home can prepare.

        Args:
            trip_id: Identifier of the trip; resubmitting the same ID updates it.
            begin: Earliest expected arrival, must be in the future.
            end: Latest expected arrival, must be after begin.

        Raises:
            APIError: With kind ``eta_error`` if the window is invalid, or any
                error raised by the update.

        Example:
            >>> now = datetime.now(UTC)
            >>> await structure.set_eta("trip-42", now + timedelta(minutes=10), now + timedelta(minutes=20))
        """
        check_eta_window(begin, end)
        eta = ETA(
            trip_id=trip_id,
            estimated_arrival_window_begin=begin,
            estimated_arrival_window_end=end,
        )
        await self._require_api().put_eta(self.structure_id, eta)
        _LOGGER.debug("Submitted ETA %s for structure %s", trip_id, self.structure_id)

    @property
    def resource_id(self) -> str:
        """Get the structure ID."""
        return self.structure_id

    async def _put(self, api: NestAPI, body: dict[str, Any]) -> Any:
        return await api.put_structure(self.structure_id, body)

    def __str__(self) -> str:
        """Return string representation of structure."""
        return f"{self.name or 'Structure'} ({self.structure_id})"
