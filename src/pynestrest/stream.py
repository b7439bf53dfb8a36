"""Reconnecting reader for the structures event stream.

The Nest API pushes structure changes over a ``text/event-stream`` response.
StructuresStream keeps such a connection open, decodes every ``data:`` record
and hands the structures to a callback, reconnecting whenever the connection
ends.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from aiohttp import ClientError

from pynestrest.const import (
    DEFAULT_RECONNECT_BASE_DELAY,
    DEFAULT_RECONNECT_MAX_DELAY,
    STREAM_DATA_PREFIX,
    STRUCTURES_COLLECTION_PATH,
)
from pynestrest.exceptions import APIError
from pynestrest.serializers import deserialize_structures_event


if TYPE_CHECKING:
    from collections.abc import Callable

    from aiohttp import ClientResponse

    from pynestrest.api import NestAPI
    from pynestrest.models import StructuresEvent
    from pynestrest.structures import Structure

    StructuresCallback = Callable[[dict[str, Structure] | None, Exception | None], None]

_LOGGER = logging.getLogger(__name__)


class StreamState(Enum):
    """Event stream connection states."""

    CONNECTING = "connecting"  # Opening (or reopening) the connection
    STREAMING = "streaming"  # Connected, reading records
    CLOSED = "closed"  # Not running


@dataclass
class ReconnectBackoffConfig:
    """Configuration for stream reconnect delays.

    Attributes:
        base_delay: Delay before the first reconnect in seconds (default 1.0).
        max_delay: Upper bound for any delay in seconds (default 60.0).
        exponential_base: Multiplier for exponential growth (default 2.0).
        jitter: Randomize delays between 0 and the computed value (default True).
    """

    base_delay: float = DEFAULT_RECONNECT_BASE_DELAY
    max_delay: float = DEFAULT_RECONNECT_MAX_DELAY
    exponential_base: float = 2.0
    jitter: bool = True


class ReconnectBackoff:
    """Exponential delay calculator for stream reconnects.

    Reconnects are never given up; only the delay between them is bounded.

    Example:
        backoff = ReconnectBackoff(base_delay=0.5, max_delay=30.0)
        backoff.calculate_delay(0)  # up to 0.5s
        backoff.calculate_delay(10)  # up to 30.0s
    """

    def __init__(
        self,
        base_delay: float = DEFAULT_RECONNECT_BASE_DELAY,
        max_delay: float = DEFAULT_RECONNECT_MAX_DELAY,
        exponential_base: float = 2.0,
        *,
        jitter: bool = True,
    ) -> None:
        """Initialize the reconnect backoff.

        Args:
            base_delay: Delay before the first reconnect in seconds.
            max_delay: Maximum delay in seconds.
            exponential_base: Multiplier for exponential growth.
            jitter: Add randomness to delays.
        """
        self.config = ReconnectBackoffConfig(
            base_delay=base_delay,
            max_delay=max_delay,
            exponential_base=exponential_base,
            jitter=jitter,
        )

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the delay before reconnect attempt ``attempt`` (0-indexed)."""
        # Cap the exponent so huge attempt counts cannot overflow
        exponent = min(attempt, 64)
        delay = min(self.config.base_delay * (self.config.exponential_base**exponent), self.config.max_delay)

        if self.config.jitter:
            delay = random.uniform(0, delay)  # noqa: S311

        return delay


def parse_stream_data(line: str) -> str | None:
    """Extract the payload of an event-stream ``data:`` line.

    Args:
        line: A single line read from the stream.

    Returns:
        The text after the ``data:`` marker, or None for any other line
        (comments, ``event:`` lines, blank separators).

    Example:
        >>> parse_stream_data('data: {"data": {}}\\n')
        '{"data": {}}'
        >>> parse_stream_data("event: keep-alive\\n") is None
        True
    """
    if not line.startswith(STREAM_DATA_PREFIX):
        return None
    return line[len(STREAM_DATA_PREFIX) :].strip()


class StructuresStream:
    """Long-lived reader for the structures event stream.

    The stream moves through CONNECTING -> STREAMING and back to CONNECTING
    whenever the connection ends, until it is closed. Reconnects wait
    according to the backoff; the attempt counter resets after every
    successful connect.

    Callback contract:
        - ``callback(structures, None)`` for every record carrying structures.
          Each structure has its ``api`` back-reference set.
        - ``callback(None, error)`` for every failed connection attempt.
        - Read errors and end-of-stream are not reported; they trigger a
          reconnect.

    Example:
        ```python
        def on_structures(structures, error):
            if error is not None:
                print(f"Stream error: {error}")
                return
            for structure in structures.values():
                print(f"{structure.name}: {structure.away}")


        async with NestClient(token="c.abc123") as client:
            stream = client.structures_stream(on_structures)
            stream.start()
            await asyncio.sleep(3600)
            await stream.stop()
        ```
    """

    def __init__(
        self,
        api: NestAPI,
        callback: StructuresCallback,
        *,
        backoff: ReconnectBackoff | None = None,
        path: str = STRUCTURES_COLLECTION_PATH,
    ) -> None:
        """Initialize the stream.

        Args:
            api: NestAPI used to open connections.
            callback: Called with (structures, None) per event or (None, error)
                per failed connection attempt.
            backoff: Reconnect delay calculator. Defaults to ReconnectBackoff().
            path: Collection path to stream.
        """
        self._api = api
        self._callback = callback
        self._backoff = backoff or ReconnectBackoff()
        self._path = path
        self._state = StreamState.CLOSED
        self._closing = False
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> StreamState:
        """Get current stream state."""
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if the stream is connecting or streaming."""
        return self._state != StreamState.CLOSED

    def start(self) -> asyncio.Task[None]:
        """Run the stream in a background task.

        Returns:
            The background task (the existing one if already started).
        """
        if self._task is None or self._task.done():
            self._closing = False
            self._task = asyncio.create_task(self.run())
        return self._task

    def close(self) -> None:
        """Ask the stream to stop after the current connection ends.

        Use stop() to also interrupt a connection that is still open.
        """
        self._closing = True

    async def stop(self) -> None:
        """Stop the stream and wait for the task running it to finish.

        This also applies to a stream driven by awaiting run() directly: the
        task awaiting run() is cancelled.
        """
        self._closing = True
        task = self._task
        if task is None or task is asyncio.current_task():
            return

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        if self._task is task:
            self._task = None

    async def run(self) -> None:
        """Read the stream until closed or cancelled.

        Raises:
            RuntimeError: If the NestAPI session is not initialized or is closed.
        """
        owns_task = self._task is None
        if owns_task:
            self._task = asyncio.current_task()

        try:
            await self._api.prime_redirect_url(self._path)

            attempt = 0
            while not self._closing:
                self._set_state(StreamState.CONNECTING)
                try:
                    async with self._api.open_stream(self._path) as response:
                        self._set_state(StreamState.STREAMING)
                        attempt = 0
                        await self._watch(response)
                except APIError as err:
                    _LOGGER.warning("Structures stream connection failed: %s", err)
                    self._dispatch(None, err)

                if self._closing:
                    break

                delay = self._backoff.calculate_delay(attempt)
                attempt += 1
                _LOGGER.debug("Reconnecting structures stream in %.1f seconds", delay)
                await asyncio.sleep(delay)
        finally:
            if owns_task:
                self._task = None
            self._set_state(StreamState.CLOSED)

    async def _watch(self, response: ClientResponse) -> None:
        """Read records until the connection ends.

        Read errors end the connection quietly so the caller can reconnect.
        """
        while not self._closing:
            try:
                raw_line = await response.content.readline()
            except (ClientError, TimeoutError) as err:
                _LOGGER.debug("Structures stream read ended: %s", err)
                return

            if not raw_line:
                _LOGGER.debug("Structures stream closed by server")
                return

            if not raw_line.endswith(b"\n"):
                _LOGGER.debug("Structures stream closed in the middle of a line")
                return

            event = self._parse_line(raw_line.decode("utf-8", errors="replace"))
            if event is not None and event.data is not None:
                self._dispatch(event.data, None)

    def _parse_line(self, line: str) -> StructuresEvent | None:
        value = parse_stream_data(line)
        if not value:
            return None

        try:
            payload = json.loads(value)
        except ValueError:
            _LOGGER.warning("Ignoring malformed stream record: %s", value[:200])
            return None

        return deserialize_structures_event(payload, self._api)

    def _dispatch(self, structures: dict[str, Structure] | None, error: Exception | None) -> None:
        """Invoke the callback, logging (not propagating) its failures."""
        try:
            self._callback(structures, error)
        except Exception:
            _LOGGER.exception("Error in structures stream callback")

    def _set_state(self, state: StreamState) -> None:
        if state != self._state:
            _LOGGER.info("Structures stream %s", state.value)
            self._state = state
