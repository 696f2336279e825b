"""Fixtures for client tests."""
from collections.abc import AsyncGenerator, Iterator

import pytest
import respx

from client.api_client import BookmarksApiClient

API_URL = "http://api.test"


@pytest.fixture
def mock_api() -> Iterator[respx.MockRouter]:
    """Mock the bookmark API."""
    with respx.mock(base_url=API_URL, assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
async def api() -> AsyncGenerator[BookmarksApiClient]:
    """API client pointed at the mocked base URL."""
    api_client = BookmarksApiClient.create(API_URL, timeout=5)
    yield api_client
    await api_client.aclose()
