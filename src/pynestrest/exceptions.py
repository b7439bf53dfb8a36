"""Custom exceptions for pynestrest library."""

from __future__ import annotations

from typing import Any

from pynestrest.const import ERROR_API


class NestError(Exception):
    """Base exception for all Nest errors."""


class APIError(NestError):
    """Exception raised for every failed Nest API operation.

    The ``kind`` is a machine-readable string from a small fixed vocabulary:

    - ``api_error``: local validation failed (no request sent) or the server
      rejected an update.
    - ``http_error``: transport failure while sending an update.
    - ``devices_error``: transport failure while fetching a collection.
    - ``body_read_error``: a response body could not be read.
    - ``eta_error``: ETA window failed local validation (no request sent).

    Collection fetches that fail with a server error carry whatever kind the
    server reported.

    Attributes:
        kind: Machine-readable error kind.
        description: Human-readable description.
        status: HTTP status line (e.g. "400 Bad Request") when a response was received.
        status_code: Numeric HTTP status when a response was received.
    """

    def __init__(
        self,
        description: str = "",
        *,
        kind: str = ERROR_API,
        status: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize APIError.

        Args:
            description: Human-readable description.
            kind: Machine-readable error kind.
            status: Optional HTTP status line.
            status_code: Optional numeric HTTP status.
        """
        super().__init__(description)
        self.kind = kind
        self.description = description
        self.status = status
        self.status_code = status_code

    def __repr__(self) -> str:
        """Return detailed string representation of the error."""
        return (
            f"{type(self).__name__}(kind={self.kind!r}, description={self.description!r}, "
            f"status_code={self.status_code!r})"
        )


class InvalidParameterError(APIError):
    """Exception raised when a setter receives an invalid value.

    Always of kind ``api_error``; raised before any request is sent.

    Attributes:
        parameter_name: Optional name of the invalid parameter.
        value: Optional value that was invalid.
    """

    def __init__(
        self,
        message: str = "",
        parameter_name: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize InvalidParameterError.

        Args:
            message: Error message.
            parameter_name: Optional name of the invalid parameter.
            value: Optional value that was invalid.
        """
        super().__init__(message, kind=ERROR_API)
        self.parameter_name = parameter_name
        self.value = value
