"""Tests for Thermostat setters."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from pynestrest.const import HvacMode
from pynestrest.devices import Thermostat
from pynestrest.exceptions import APIError, InvalidParameterError


DEVICE_ID = "peyiJNo0IldT2YlIVtYaGQ"


@pytest.fixture
def thermostat(mock_api: AsyncMock) -> Thermostat:
    """Create a Thermostat bound to the mock API."""
    return Thermostat(
        device_id=DEVICE_ID,
        name="Hallway",
        hvac_mode="heat",
        target_temperature_f=68,
        api=mock_api,
    )


class TestFanTimer:
    """Test set_fan_timer_active."""

    @pytest.mark.parametrize("active", [True, False])
    async def test_sends_flag(self, thermostat: Thermostat, mock_api: AsyncMock, active: bool) -> None:
        """Test that the flag is sent without validation."""
        await thermostat.set_fan_timer_active(active)

        mock_api.put_thermostat.assert_called_once_with(DEVICE_ID, {"fan_timer_active": active})
        assert thermostat.fan_timer_active is active


class TestHvacMode:
    """Test set_hvac_mode."""

    @pytest.mark.parametrize(
        ("mode", "expected"),
        [
            (HvacMode.COOL, "cool"),
            (HvacMode.HEAT, "heat"),
            (HvacMode.HEAT_COOL, "heat-cool"),
            (HvacMode.OFF, "off"),
        ],
    )
    async def test_valid_modes(
        self,
        thermostat: Thermostat,
        mock_api: AsyncMock,
        mode: HvacMode,
        expected: str,
    ) -> None:
        """Test that each mode maps to its API string."""
        await thermostat.set_hvac_mode(mode)

        mock_api.put_thermostat.assert_called_once_with(DEVICE_ID, {"hvac_mode": expected})
        assert thermostat.hvac_mode == expected

    @pytest.mark.parametrize("mode", [99, -1, 4, True, "cool", None])
    async def test_invalid_mode(self, thermostat: Thermostat, mock_api: AsyncMock, mode: object) -> None:
        """Test that unknown modes fail locally without a request."""
        with pytest.raises(InvalidParameterError) as exc_info:
            await thermostat.set_hvac_mode(mode)  # type: ignore[arg-type]

        assert exc_info.value.kind == "api_error"
        assert "cool, heat, heat-cool or off" in exc_info.value.description
        assert exc_info.value.status_code is None
        mock_api.put_thermostat.assert_not_called()
        assert thermostat.hvac_mode == "heat"


class TestTargetTemperatureCelsius:
    """Test set_target_temperature_c."""

    @pytest.mark.parametrize("temperature", [9, 21.5, 32])
    async def test_valid_range(self, thermostat: Thermostat, mock_api: AsyncMock, temperature: float) -> None:
        """Test that temperatures within 9-32 are sent as floats."""
        await thermostat.set_target_temperature_c(temperature)

        mock_api.put_thermostat.assert_called_once_with(DEVICE_ID, {"target_temperature_c": float(temperature)})
        body = mock_api.put_thermostat.call_args.args[1]
        assert isinstance(body["target_temperature_c"], float)

    @pytest.mark.parametrize("temperature", [8.9, 32.1, -10, 100])
    async def test_out_of_range(self, thermostat: Thermostat, mock_api: AsyncMock, temperature: float) -> None:
        """Test that temperatures outside 9-32 fail locally."""
        with pytest.raises(InvalidParameterError) as exc_info:
            await thermostat.set_target_temperature_c(temperature)

        assert exc_info.value.kind == "api_error"
        assert exc_info.value.parameter_name == "target_temperature_c"
        assert exc_info.value.value == temperature
        mock_api.put_thermostat.assert_not_called()


class TestTargetTemperatureFahrenheit:
    """Test set_target_temperature_f."""

    @pytest.mark.parametrize("temperature", [50, 78, 90])
    async def test_valid_range(self, thermostat: Thermostat, mock_api: AsyncMock, temperature: int) -> None:
        """Test that temperatures within 50-90 are sent as integers."""
        await thermostat.set_target_temperature_f(temperature)

        mock_api.put_thermostat.assert_called_once_with(DEVICE_ID, {"target_temperature_f": temperature})

    @pytest.mark.parametrize("temperature", [49, 91, 0])
    async def test_out_of_range(self, thermostat: Thermostat, mock_api: AsyncMock, temperature: int) -> None:
        """Test that temperatures outside 50-90 fail locally."""
        with pytest.raises(InvalidParameterError) as exc_info:
            await thermostat.set_target_temperature_f(temperature)

        assert exc_info.value.kind == "api_error"
        assert "Fahrenheit" in exc_info.value.description
        mock_api.put_thermostat.assert_not_called()

    async def test_response_is_merged(self, thermostat: Thermostat, mock_api: AsyncMock) -> None:
        """Test that the accepted values returned by the server update the object."""
        mock_api.put_thermostat.return_value = {"target_temperature_f": 78}

        await thermostat.set_target_temperature_f(78)

        assert thermostat.target_temperature_f == 78
        assert thermostat.raw_data["target_temperature_f"] == 78

    async def test_malformed_response_applies_request(self, thermostat: Thermostat, mock_api: AsyncMock) -> None:
        """Test that a success without a decodable body applies the sent values."""
        mock_api.put_thermostat.return_value = None

        await thermostat.set_target_temperature_f(72)

        assert thermostat.target_temperature_f == 72

    @pytest.mark.parametrize("temperature", [78.7, 72.5, float("nan")])
    async def test_fractional_degrees_rejected(
        self,
        thermostat: Thermostat,
        mock_api: AsyncMock,
        temperature: float,
    ) -> None:
        """Test that fractional Fahrenheit values fail instead of being truncated."""
        with pytest.raises(InvalidParameterError) as exc_info:
            await thermostat.set_target_temperature_f(temperature)

        assert exc_info.value.parameter_name == "target_temperature_f"
        assert "whole degrees" in exc_info.value.description
        mock_api.put_thermostat.assert_not_called()

    async def test_whole_float_accepted(self, thermostat: Thermostat, mock_api: AsyncMock) -> None:
        """Test that a float holding a whole number is sent as an integer."""
        await thermostat.set_target_temperature_f(78.0)

        mock_api.put_thermostat.assert_called_once_with(DEVICE_ID, {"target_temperature_f": 78})


class TestTargetTemperatureHighLow:
    """Test the heat-cool range setters."""

    async def test_celsius_range(self, thermostat: Thermostat, mock_api: AsyncMock) -> None:
        """Test that both Celsius bounds are sent."""
        await thermostat.set_target_temperature_high_low_c(24, 19.5)

        mock_api.put_thermostat.assert_called_once_with(
            DEVICE_ID,
            {"target_temperature_high_c": 24.0, "target_temperature_low_c": 19.5},
        )
        assert thermostat.target_temperature_high_c == 24.0
        assert thermostat.target_temperature_low_c == 19.5

    async def test_fahrenheit_range(self, thermostat: Thermostat, mock_api: AsyncMock) -> None:
        """Test that both Fahrenheit bounds are sent."""
        await thermostat.set_target_temperature_high_low_f(75, 65)

        mock_api.put_thermostat.assert_called_once_with(
            DEVICE_ID,
            {"target_temperature_high_f": 75, "target_temperature_low_f": 65},
        )

    async def test_equal_bounds_allowed(self, thermostat: Thermostat, mock_api: AsyncMock) -> None:
        """Test that high == low is accepted."""
        await thermostat.set_target_temperature_high_low_f(70, 70)

        mock_api.put_thermostat.assert_called_once()

    @pytest.mark.parametrize(("high", "low"), [(75.5, 65), (75, 64.9)])
    async def test_fahrenheit_fractional_bounds_rejected(
        self,
        thermostat: Thermostat,
        mock_api: AsyncMock,
        high: float,
        low: float,
    ) -> None:
        """Test that fractional Fahrenheit bounds fail locally."""
        with pytest.raises(InvalidParameterError, match="whole degrees"):
            await thermostat.set_target_temperature_high_low_f(high, low)

        mock_api.put_thermostat.assert_not_called()

    @pytest.mark.parametrize(
        "setter",
        ["set_target_temperature_high_low_c", "set_target_temperature_high_low_f"],
    )
    async def test_high_below_low(self, thermostat: Thermostat, mock_api: AsyncMock, setter: str) -> None:
        """Test that an inverted range fails locally for both units."""
        with pytest.raises(InvalidParameterError) as exc_info:
            await getattr(thermostat, setter)(60, 70)

        assert exc_info.value.kind == "api_error"
        assert "high temperature" in exc_info.value.description
        mock_api.put_thermostat.assert_not_called()


class TestUpdateFailures:
    """Test error propagation from the API."""

    async def test_api_error_propagates(self, thermostat: Thermostat, mock_api: AsyncMock) -> None:
        """Test that API errors are raised unchanged and state is kept."""
        error = APIError("Invalid value for hvac_mode", status="400 Bad Request", status_code=400)
        mock_api.put_thermostat.side_effect = error

        with pytest.raises(APIError) as exc_info:
            await thermostat.set_hvac_mode(HvacMode.COOL)

        assert exc_info.value is error
        assert thermostat.hvac_mode == "heat"

    async def test_unbound_thermostat(self) -> None:
        """Test that a thermostat without an API cannot be updated."""
        thermostat = Thermostat(device_id=DEVICE_ID)

        with pytest.raises(RuntimeError, match="not bound"):
            await thermostat.set_fan_timer_active(True)

    async def test_validation_runs_before_binding_check(self) -> None:
        """Test that invalid input is reported even without an API."""
        thermostat = Thermostat(device_id=DEVICE_ID)

        with pytest.raises(InvalidParameterError):
            await thermostat.set_target_temperature_c(40)


def test_str() -> None:
    """Test string representation."""
    thermostat = Thermostat(device_id=DEVICE_ID, name="Hallway", name_long="Hallway Thermostat")
    assert str(thermostat) == f"Hallway Thermostat ({DEVICE_ID})"
