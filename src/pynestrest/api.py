"""Low-level API client for the Nest REST endpoints.

This module provides direct HTTP communication with the Nest API: the
PUT-and-retry primitive used by every setter, the collection GET, and the
raw event-stream connection. It also owns the redirect base URL learned from
the API, which every request made through the same NestAPI shares.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout, hdrs
from yarl import URL

from pynestrest.const import (
    DEFAULT_API_URL,
    DEFAULT_STREAM_READ_TIMEOUT,
    DEFAULT_TIMEOUT,
    ERROR_BODY_READ,
    ERROR_DEVICES,
    ERROR_HTTP,
    ETA_SUFFIX,
    STREAM_CONTENT_TYPE,
    STRUCTURES_COLLECTION_PATH,
    STRUCTURES_PATH,
    THERMOSTATS_COLLECTION_PATH,
    THERMOSTATS_PATH,
)
from pynestrest.exceptions import APIError
from pynestrest.serializers import (
    api_error_from_collection_response,
    api_error_from_update_response,
    serialize_eta,
)


if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from types import TracebackType

    from pynestrest.models import ETA

_LOGGER = logging.getLogger(__name__)


class NestAPI:
    """Low-level API client for the Nest REST API.

    This class handles raw HTTP communication: URL construction against the
    current base URL, the ``auth`` query parameter, the single redirect retry
    on updates, and response decoding. Failures are raised as APIError with a
    kind describing where they happened.

    The Nest API answers the first request with a 307 redirect to the host
    that serves the account. The redirect target's scheme and host are cached
    in ``redirect_url`` and used for every later request made through this
    instance, so resources sharing a NestAPI also share the redirect.

    Example:
        ```python
        from pynestrest.api import NestAPI

        async with NestAPI(token="c.abc123") as api:
            structures = await api.get_structures()
            await api.put_structure("structure1", {"away": "away"})
        ```

    Attributes:
        api_url: Base URL for the API (default: https://developer-api.nest.com).
        token: Access token sent as the ``auth`` query parameter.
    """

    def __init__(
        self,
        *,
        token: str,
        session: ClientSession | None = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        stream_read_timeout: float = DEFAULT_STREAM_READ_TIMEOUT,
    ) -> None:
        """Initialize the API client.

        Args:
            token: Access token for the Nest API.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            api_url: Base URL for the API. Defaults to the Nest production API.
            timeout: Total timeout in seconds for regular requests.
            stream_read_timeout: Seconds without any data after which an event
                stream connection is considered dead.
        """
        self.api_url = api_url.rstrip("/")
        self.token = token
        self._session = session
        self._owns_session = session is None
        self._redirect_url: str | None = None
        self._timeout = timeout
        self._stream_read_timeout = stream_read_timeout

    @property
    def redirect_url(self) -> str | None:
        """Get the cached redirect base URL (None until a redirect is seen)."""
        return self._redirect_url

    @property
    def base_url(self) -> str:
        """Get the base URL requests are currently sent to."""
        return self._redirect_url or self.api_url

    async def __aenter__(self) -> NestAPI:
        """Enter the context manager.

        Creates session if needed.

        Returns:
            Self for use in async with statements.
        """
        if self._session is None:
            self._session = ClientSession()
            self._owns_session = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager.

        Closes session if it was created by this client.
        """
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # -------------------------------------------------------------------------
    # Core request handling
    # -------------------------------------------------------------------------

    def _require_session(self) -> ClientSession:
        if self._session is None:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        if self._session.closed:
            msg = "Session is closed. Cannot make request."
            raise RuntimeError(msg)

        return self._session

    def _update_redirect_url(self, url: URL) -> None:
        """Cache the scheme and host of ``url`` as the redirect base URL."""
        redirect_url = str(url.origin())
        if redirect_url != self._redirect_url:
            _LOGGER.info("Using redirect base URL %s", redirect_url)
        self._redirect_url = redirect_url

    def _auth_params(self) -> dict[str, str]:
        return {"auth": self.token}

    async def put(self, path: str, body: dict[str, Any]) -> Any:
        """Send a JSON update to a resource, following one redirect.

        A 307 response updates the cached redirect base URL and the request is
        sent once more against it. A second redirect is not followed.

        Args:
            path: Resource path (e.g. "/devices/thermostats/<id>").
            body: JSON body to send.

        Returns:
            Decoded response body on HTTP 200, or None if the body was not
            valid JSON.

        Raises:
            RuntimeError: If session is not initialized or is closed.
            APIError: ``http_error`` on transport failure, ``api_error`` with
                status attached for any non-200 response.
        """
        session = self._require_session()
        response, data = await self._send_put(session, path, body)

        if response.status == HTTPStatus.TEMPORARY_REDIRECT:
            location = response.headers.get(hdrs.LOCATION)
            target = response.url.join(URL(location)) if location else response.url
            self._update_redirect_url(target)
            _LOGGER.debug("Received 307 for %s, retrying against %s", path, self.base_url)
            response, data = await self._send_put(session, path, body)

        if response.status == HTTPStatus.OK:
            return data

        _LOGGER.debug("Update of %s failed: HTTP %d", path, response.status)
        raise api_error_from_update_response(response.status, response.reason, data)

    async def _send_put(
        self,
        session: ClientSession,
        path: str,
        body: dict[str, Any],
    ) -> tuple[ClientResponse, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with session.put(
                url,
                json=body,
                params=self._auth_params(),
                allow_redirects=False,
                timeout=ClientTimeout(total=self._timeout),
            ) as response:
                payload = await response.read()
        except (ClientError, TimeoutError) as err:
            _LOGGER.warning("PUT %s failed: %s", url, err)
            raise APIError(_describe(err), kind=ERROR_HTTP) from err

        return response, _decode_json(payload, url)

    async def get_collection(self, path: str) -> dict[str, Any]:
        """Fetch a collection resource.

        The first fetch made before any redirect is known caches the scheme
        and host the response was finally served from, so later requests go
        straight to it.

        Args:
            path: Collection path (e.g. "/structures.json").

        Returns:
            Decoded mapping of ID to raw resource attributes.

        Raises:
            RuntimeError: If session is not initialized or is closed.
            APIError: ``devices_error`` on transport failure,
                ``body_read_error`` if the body cannot be read, or the
                server's error record for a non-200 response.
        """
        session = self._require_session()
        url = f"{self.base_url}{path}"
        prime = self._redirect_url is None

        try:
            async with session.get(
                url,
                params=self._auth_params(),
                timeout=ClientTimeout(total=self._timeout),
            ) as response:
                if prime:
                    self._update_redirect_url(response.url)
                try:
                    payload = await response.read()
                except (ClientError, TimeoutError) as err:
                    raise APIError(_describe(err), kind=ERROR_BODY_READ) from err
                status = response.status
        except (ClientError, TimeoutError) as err:
            _LOGGER.warning("GET %s failed: %s", url, err)
            raise APIError(_describe(err), kind=ERROR_DEVICES) from err

        data = _decode_json(payload, url)
        if status != HTTPStatus.OK:
            _LOGGER.debug("Fetch of %s failed: HTTP %d", path, status)
            raise api_error_from_collection_response(data)

        return data if isinstance(data, dict) else {}

    async def prime_redirect_url(self, path: str = STRUCTURES_COLLECTION_PATH) -> None:
        """Learn the redirect base URL with a plain GET if none is cached yet.

        This is best effort: a failure is logged and the next request simply
        starts from the configured API URL.
        """
        if self._redirect_url is not None:
            return

        session = self._require_session()
        url = f"{self.api_url}{path}"
        try:
            async with session.get(
                url,
                params=self._auth_params(),
                timeout=ClientTimeout(total=self._timeout),
            ) as response:
                self._update_redirect_url(response.url)
        except (ClientError, TimeoutError) as err:
            _LOGGER.warning("Could not determine redirect URL from %s: %s", url, err)

    @asynccontextmanager
    async def open_stream(self, path: str) -> AsyncIterator[ClientResponse]:
        """Open an event-stream connection to a collection.

        There is no total timeout; the connection is considered dead after
        ``stream_read_timeout`` seconds without data.

        Args:
            path: Collection path (e.g. "/structures.json").

        Yields:
            The streaming response, released on exit.

        Raises:
            RuntimeError: If session is not initialized or is closed.
            APIError: ``http_error`` if the connection fails, or the server's
                error record (with status attached) for a non-200 response.
        """
        session = self._require_session()
        url = f"{self.base_url}{path}"
        timeout = ClientTimeout(
            total=None,
            sock_connect=self._timeout,
            sock_read=self._stream_read_timeout,
        )

        try:
            response = await session.get(
                url,
                params=self._auth_params(),
                headers={hdrs.ACCEPT: STREAM_CONTENT_TYPE},
                timeout=timeout,
            )
        except (ClientError, TimeoutError) as err:
            _LOGGER.warning("Stream connection to %s failed: %s", url, err)
            raise APIError(_describe(err), kind=ERROR_HTTP) from err

        try:
            if response.status != HTTPStatus.OK:
                try:
                    payload = await response.read()
                except (ClientError, TimeoutError):
                    payload = b""
                error = api_error_from_collection_response(_decode_json(payload, url))
                error.status = f"{response.status} {response.reason}"
                error.status_code = response.status
                raise error

            yield response
        finally:
            response.release()

    # -------------------------------------------------------------------------
    # Resource endpoints
    # -------------------------------------------------------------------------

    async def put_thermostat(self, device_id: str, body: dict[str, Any]) -> Any:
        """Update thermostat attributes.

        Args:
            device_id: Thermostat's unique identifier.
            body: Attributes to change, e.g. {"hvac_mode": "heat"}.

        Returns:
            Decoded response body (the accepted attributes).
        """
        return await self.put(f"{THERMOSTATS_PATH}/{device_id}", body)

    async def put_structure(self, structure_id: str, body: dict[str, Any]) -> Any:
        """Update structure attributes.

        Args:
            structure_id: Structure's unique identifier.
            body: Attributes to change, e.g. {"away": "away"}.

        Returns:
            Decoded response body (the accepted attributes).
        """
        return await self.put(f"{STRUCTURES_PATH}/{structure_id}", body)

    async def put_eta(self, structure_id: str, eta: ETA) -> Any:
        """Submit an estimated arrival window for a structure."""
        return await self.put(f"{STRUCTURES_PATH}/{structure_id}{ETA_SUFFIX}", serialize_eta(eta))

    async def get_structures(self) -> dict[str, Any]:
        """Get all structures as a raw ID -> attributes mapping."""
        return await self.get_collection(STRUCTURES_COLLECTION_PATH)

    async def get_thermostats(self) -> dict[str, Any]:
        """Get all thermostats as a raw ID -> attributes mapping."""
        return await self.get_collection(THERMOSTATS_COLLECTION_PATH)


def _decode_json(payload: bytes, url: str) -> Any:
    """Decode a JSON body, returning None for empty or malformed payloads."""
    if not payload:
        return None
    try:
        return json.loads(payload)
    except ValueError:
        _LOGGER.warning("Ignoring malformed JSON response from %s", url)
        return None


def _describe(err: BaseException) -> str:
    return str(err) or type(err).__name__
