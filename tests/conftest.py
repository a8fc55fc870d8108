"""Test configuration and fixtures."""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest

# Set test environment variables BEFORE importing the package
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("LINEAR_API_KEY", "lin_api_test_key")

from linear_mcp.config import get_settings
from linear_mcp.linear import LinearClient


TEST_API_KEY = "lin_api_test_key"
TEST_API_URL = "https://linear.test/graphql"


def make_response(json_data=None, status_code=200, reason_phrase="OK", json_error=None):
    """Build a mock httpx.Response-like object.

    Pass ``json_error`` to make ``.json()`` raise instead of returning data.
    """
    resp = MagicMock()
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = json_data
    resp.status_code = status_code
    resp.reason_phrase = reason_phrase
    return resp


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; reset them around every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def mock_http_client():
    """AsyncMock standing in for the shared httpx.AsyncClient."""
    client = AsyncMock()
    client.post.return_value = make_response({"data": {}})
    return client


@pytest.fixture
def linear_client(mock_http_client):
    """LinearClient wired to the mock HTTP client."""
    return LinearClient(TEST_API_KEY, api_url=TEST_API_URL, http_client=mock_http_client)


