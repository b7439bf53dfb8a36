"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

import pytest
from aiohttp import ClientSession

from pynestrest.api import NestAPI


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable, Callable

TEST_TOKEN = "c.test-token"


@pytest.fixture
async def mock_session() -> AsyncGenerator[ClientSession]:
    """Create a mock aiohttp ClientSession.

    Yields:
        Mock ClientSession for testing.
    """
    session = AsyncMock(spec=ClientSession)
    session.closed = False

    async def mock_close() -> None:
        session.closed = True

    session.close = mock_close

    yield session

    if not session.closed:
        await session.close()


@pytest.fixture
def mock_api() -> AsyncMock:
    """Create a mock NestAPI whose updates succeed with an empty body."""
    api = AsyncMock(spec=NestAPI)
    api.put_thermostat = AsyncMock(return_value={})
    api.put_structure = AsyncMock(return_value={})
    api.put_eta = AsyncMock(return_value={})
    return api


@pytest.fixture
async def make_api() -> AsyncGenerator[Callable[[str], Awaitable[NestAPI]]]:
    """Create NestAPI instances with their own session, closed after the test."""
    apis: list[NestAPI] = []

    async def _make(api_url: str) -> NestAPI:
        api = NestAPI(token=TEST_TOKEN, api_url=api_url)
        await api.__aenter__()
        apis.append(api)
        return api

    yield _make

    for api in apis:
        await api.__aexit__(None, None, None)
