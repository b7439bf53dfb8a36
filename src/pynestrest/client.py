"""High-level client for the Nest REST API.

This module provides the entry point most callers use: fetching structures and
thermostats as resource objects and subscribing to structure changes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from aiohttp import ClientSession  # noqa: TC002 - Used at runtime for type hints

from pynestrest.api import NestAPI
from pynestrest.const import DEFAULT_API_URL, DEFAULT_STREAM_READ_TIMEOUT, DEFAULT_TIMEOUT
from pynestrest.serializers import deserialize_structures, deserialize_thermostats
from pynestrest.stream import ReconnectBackoff, StructuresStream


if TYPE_CHECKING:
    from types import TracebackType

    from pynestrest.devices import Thermostat
    from pynestrest.stream import StructuresCallback
    from pynestrest.structures import Structure

_LOGGER = logging.getLogger(__name__)


class NestClient:
    """Client for Nest structures and thermostats.

    The client uses a low-level NestAPI for HTTP communication. Every
    Structure and Thermostat it returns holds a reference to that NestAPI, so
    their setters share the client's session, token and redirect URL.

    Example:
        Basic usage with automatic session management:

        ```python
        from pynestrest import AwayMode, NestClient

        async with NestClient(token="c.abc123") as client:
            structures = await client.get_structures()
            for structure in structures.values():
                print(f"{structure.name}: {structure.away}")
                await structure.set_away(AwayMode.HOME)

            thermostats = await client.get_thermostats()
            for thermostat in thermostats.values():
                await thermostat.set_target_temperature_c(21.5)
        ```

        Streaming structure changes:

        ```python
        def on_structures(structures, error):
            if error is None:
                print(structures)


        async with NestClient(token="c.abc123") as client:
            await client.watch_structures(on_structures)  # runs until cancelled
        ```

    Attributes:
        api: Low-level NestAPI instance for HTTP communication.
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        *,
        session: ClientSession | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        stream_read_timeout: float = DEFAULT_STREAM_READ_TIMEOUT,
    ) -> None:
        """Initialize the Nest client.

        Args:
            token: Access token for the Nest API. Obtaining it is up to the caller.
            api_url: Base URL for the API. Defaults to the Nest production API.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            timeout: Total timeout in seconds for regular requests.
            stream_read_timeout: Seconds without data before a stream reconnects.
        """
        self._api = NestAPI(
            token=token,
            session=session,
            api_url=api_url,
            timeout=timeout,
            stream_read_timeout=stream_read_timeout,
        )
        self._streams: list[StructuresStream] = []

    @property
    def api(self) -> NestAPI:
        """Get the underlying API client."""
        return self._api

    async def __aenter__(self) -> NestClient:
        """Enter the context manager.

        Creates session if needed.

        Returns:
            Self for use in async with statements.
        """
        await self._api.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager.

        Stops all streams created by this client and closes the API client.
        """
        streams, self._streams = self._streams, []
        for stream in streams:
            await stream.stop()

        await self._api.__aexit__(exc_type, exc_val, exc_tb)

    async def get_structures(self) -> dict[str, Structure]:
        """Get all structures for the account.

        Returns:
            Mapping of structure ID to Structure.

        Raises:
            APIError: If the fetch fails.
        """
        data = await self._api.get_structures()
        structures = deserialize_structures(data, self._api)
        _LOGGER.debug("Fetched %d structure(s)", len(structures))
        return structures

    async def get_thermostats(self) -> dict[str, Thermostat]:
        """Get all thermostats for the account.

        Returns:
            Mapping of device ID to Thermostat.

        Raises:
            APIError: If the fetch fails.
        """
        data = await self._api.get_thermostats()
        thermostats = deserialize_thermostats(data, self._api)
        _LOGGER.debug("Fetched %d thermostat(s)", len(thermostats))
        return thermostats

    def structures_stream(
        self,
        callback: StructuresCallback,
        *,
        backoff: ReconnectBackoff | None = None,
    ) -> StructuresStream:
        """Create a structures event stream bound to this client.

        The stream is not started; call ``start()`` to run it in the
        background or await ``run()`` directly. Streams created here are
        stopped when the client's context exits.

        Args:
            callback: Called with (structures, None) per event or (None, error)
                per failed connection attempt.
            backoff: Reconnect delay calculator.

        Returns:
            StructuresStream instance.
        """
        stream = StructuresStream(self._api, callback, backoff=backoff)
        self._streams.append(stream)
        return stream

    async def watch_structures(
        self,
        callback: StructuresCallback,
        *,
        backoff: ReconnectBackoff | None = None,
    ) -> None:
        """Stream structure changes to ``callback`` until cancelled.

        Exiting the client cancels the task awaiting this call.

        Args:
            callback: Called with (structures, None) per event or (None, error)
                per failed connection attempt.
            backoff: Reconnect delay calculator.
        """
        stream = self.structures_stream(callback, backoff=backoff)
        try:
            await stream.run()
        finally:
            if stream in self._streams:
                self._streams.remove(stream)
