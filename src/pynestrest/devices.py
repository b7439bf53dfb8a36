"""Thermostat resource objects with validated setters.

A Thermostat mirrors the thermostat attributes reported by the Nest API and
carries a back-reference to the NestAPI that produced it. Setters validate
their input locally, send a minimal JSON patch and merge the accepted values
back into the object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pynestrest.const import (
    HVAC_MODE_VALUES,
    TARGET_TEMP_C_MAX,
    TARGET_TEMP_C_MIN,
    TARGET_TEMP_F_MAX,
    TARGET_TEMP_F_MIN,
    HvacMode,
)
from pynestrest.exceptions import InvalidParameterError
from pynestrest.models import NestResource


if TYPE_CHECKING:
    from pynestrest.api import NestAPI


@dataclass
class Thermostat(NestResource):
    """A single Nest thermostat.

    Only the fields touched by setters are validated locally; every other
    attribute is taken from the API as-is. The complete decoded payload is
    kept in ``raw_data`` so attributes without a dedicated field are not lost.

    Example:
        ```python
        async with NestClient(token="c.abc123") as client:
            thermostats = await client.get_thermostats()
            thermostat = thermostats["peyiJNo0IldT2YlIVtYaGQ"]

            await thermostat.set_hvac_mode(HvacMode.HEAT)
            await thermostat.set_target_temperature_f(68)
        ```

    Attributes:
        device_id: Unique thermostat identifier.
        api: NestAPI that produced this thermostat (used by setters).
    """

    device_id: str
    name: str | None = None
    name_long: str | None = None
    structure_id: str | None = None
    where_id: str | None = None
    locale: str | None = None
    software_version: str | None = None
    is_online: bool | None = None
    last_connection: str | None = None
    can_cool: bool | None = None
    can_heat: bool | None = None
    is_using_emergency_heat: bool | None = None
    has_fan: bool | None = None
    has_leaf: bool | None = None
    fan_timer_active: bool | None = None
    fan_timer_timeout: str | None = None
    temperature_scale: str | None = None
    hvac_mode: str | None = None
    hvac_state: str | None = None
    target_temperature_c: float | None = None
    target_temperature_f: int | None = None
    target_temperature_high_c: float | None = None
    target_temperature_low_c: float | None = None
    target_temperature_high_f: int | None = None
    target_temperature_low_f: int | None = None
    ambient_temperature_c: float | None = None
    ambient_temperature_f: int | None = None
    humidity: int | None = None
    raw_data: dict[str, Any] = field(default_factory=dict, repr=False)
    api: NestAPI | None = field(default=None, repr=False, compare=False)

    # -------------------------------------------------------------------------
    # Setters
    # -------------------------------------------------------------------------

    async def set_fan_timer_active(self, active: bool) -> None:
        """Turn the fan timer on or off.

        Args:
            active: True to start the fan timer, False to stop it.

        Raises:
            APIError: If the update fails.
        """
        await self._update({"fan_timer_active": active})

    async def set_hvac_mode(self, mode: HvacMode | int) -> None:
        """Set the HVAC mode.

        Args:
            mode: One of HvacMode.COOL, HEAT, HEAT_COOL or OFF.

        Raises:
            InvalidParameterError: If mode is not a recognized HVAC mode.
            APIError: If the update fails.
        """
        value = HVAC_MODE_VALUES.get(mode) if isinstance(mode, int) and not isinstance(mode, bool) else None
        if value is None:
            msg = "Invalid HvacMode requested - must be cool, heat, heat-cool or off"
            raise InvalidParameterError(msg, parameter_name="hvac_mode", value=mode)

        await self._update({"hvac_mode": value})

    async def set_target_temperature_c(self, temperature: float) -> None:
        """Set the target temperature in Celsius.

        Args:
            temperature: Target temperature (9-32).

        Raises:
            InvalidParameterError: If temperature is outside the valid range.
            APIError: If the update fails.
        """
        if not TARGET_TEMP_C_MIN <= temperature <= TARGET_TEMP_C_MAX:
            msg = f"Temperature must be between {TARGET_TEMP_C_MIN} and {TARGET_TEMP_C_MAX} Celsius"
            raise InvalidParameterError(msg, parameter_name="target_temperature_c", value=temperature)

        await self._update({"target_temperature_c": float(temperature)})

    async def set_target_temperature_f(self, temperature: int) -> None:
        """Set the target temperature in Fahrenheit.

        Args:
            temperature: Target temperature (50-90).

        Raises:
            InvalidParameterError: If temperature is not a whole number of degrees
                or is outside the valid range.
            APIError: If the update fails.
        """
        _check_whole_degrees(temperature, "target_temperature_f")
        if not TARGET_TEMP_F_MIN <= temperature <= TARGET_TEMP_F_MAX:
            msg = f"Temperature must be between {TARGET_TEMP_F_MIN} and {TARGET_TEMP_F_MAX} Fahrenheit"
            raise InvalidParameterError(msg, parameter_name="target_temperature_f", value=temperature)

        await self._update({"target_temperature_f": int(temperature)})

    async def set_target_temperature_high_low_c(self, high: float, low: float) -> None:
        """Set the heat-cool range in Celsius.

        Only meaningful while the thermostat is in HEAT_COOL mode.

        Args:
            high: Upper bound of the range.
            low: Lower bound of the range.

        Raises:
            InvalidParameterError: If high is below low.
            APIError: If the update fails.
        """
        if high < low:
            msg = "The high temperature must be greater than the low temperature"
            raise InvalidParameterError(msg, parameter_name="target_temperature_high_c", value=high)

        await self._update(
            {
                "target_temperature_high_c": float(high),
                "target_temperature_low_c": float(low),
            }
        )

    async def set_target_temperature_high_low_f(self, high: int, low: int) -> None:
        """Set the heat-cool range in Fahrenheit.

        Args:
            high: Upper bound of the range.
            low: Lower bound of the range.

        Raises:
            InvalidParameterError: If a bound is not a whole number of degrees
                or high is below low.
            APIError: If the update fails.
        """
        _check_whole_degrees(high, "target_temperature_high_f")
        _check_whole_degrees(low, "target_temperature_low_f")
        if high < low:
            msg = "The high temperature must be greater than the low temperature"
            raise InvalidParameterError(msg, parameter_name="target_temperature_high_f", value=high)

        await self._update(
            {
                "target_temperature_high_f": int(high),
                "target_temperature_low_f": int(low),
            }
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @property
    def resource_id(self) -> str:
        """Get the thermostat ID."""
        return self.device_id

    async def _put(self, api: NestAPI, body: dict[str, Any]) -> Any:
        return await api.put_thermostat(self.device_id, body)

    def __str__(self) -> str:
        """Return string representation of thermostat."""
        return f"{self.name_long or self.name or 'Thermostat'} ({self.device_id})"


def _check_whole_degrees(value: float, parameter_name: str) -> None:
    """Reject Fahrenheit values the API would not accept as integers."""
    if isinstance(value, bool) or not float(value).is_integer():
        msg = "Fahrenheit temperatures must be whole degrees"
        raise InvalidParameterError(msg, parameter_name=parameter_name, value=value)
