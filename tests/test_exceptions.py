"""Tests for pynestrest exceptions."""

from __future__ import annotations

from pynestrest.exceptions import APIError, InvalidParameterError, NestError


class TestNestError:
    """Test NestError base exception."""

    def test_base_exception_inherits_from_exception(self) -> None:
        """Test that NestError inherits from Exception."""
        assert issubclass(NestError, Exception)

    def test_base_exception_message(self) -> None:
        """Test that NestError can be created with a message."""
        error = NestError("Test error message")
        assert str(error) == "Test error message"


class TestAPIError:
    """Test APIError exception."""

    def test_inherits_from_base_error(self) -> None:
        """Test that APIError inherits from NestError."""
        assert issubclass(APIError, NestError)

    def test_defaults(self) -> None:
        """Test APIError defaults to api_error without status."""
        error = APIError("Something failed")

        assert str(error) == "Something failed"
        assert error.kind == "api_error"
        assert error.description == "Something failed"
        assert error.status is None
        assert error.status_code is None

    def test_with_status(self) -> None:
        """Test APIError carrying a response status."""
        error = APIError("Forbidden", kind="api_error", status="403 Forbidden", status_code=403)

        assert error.status == "403 Forbidden"
        assert error.status_code == 403

    def test_repr_includes_kind(self) -> None:
        """Test that repr shows the kind."""
        error = APIError("connection refused", kind="http_error")

        assert "http_error" in repr(error)
        assert "connection refused" in repr(error)


class TestInvalidParameterError:
    """Test InvalidParameterError exception."""

    def test_inherits_from_api_error(self) -> None:
        """Test that InvalidParameterError is an APIError."""
        assert issubclass(InvalidParameterError, APIError)

    def test_error_with_parameter_info(self) -> None:
        """Test InvalidParameterError with parameter details."""
        error = InvalidParameterError(
            "Temperature must be between 50 and 90 Fahrenheit",
            parameter_name="target_temperature_f",
            value=95,
        )

        assert error.kind == "api_error"
        assert error.parameter_name == "target_temperature_f"
        assert error.value == 95
        assert error.status_code is None

    def test_error_without_parameter_info(self) -> None:
        """Test InvalidParameterError with only a message."""
        error = InvalidParameterError("Invalid value")

        assert error.parameter_name is None
        assert error.value is None
