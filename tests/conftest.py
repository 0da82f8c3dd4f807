"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

BASE_URL = "https://dex.example.com/api"


def create_async_response(status=200, text="", headers=None):
    """Create a mock aiohttp response usable as an async context manager."""
    resp = AsyncMock()
    resp.status = status
    resp.headers = headers if headers is not None else {"Content-Type": "application/json"}
    resp.read = AsyncMock(return_value=text.encode() if isinstance(text, str) else text)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=None)
    return resp


def create_session(resp=None, side_effect=None):
    """Create a mock session whose ``request`` returns ``resp``."""
    session = MagicMock()
    if side_effect is not None:
        session.request = MagicMock(side_effect=side_effect)
    else:
        session.request = MagicMock(return_value=resp)
    return session


@pytest.fixture
def api_key():
    """Test API key."""
    return "test_api_key_123456"


@pytest.fixture
def base_url():
    return BASE_URL


@pytest.fixture
def sample_ticker_response():
    return '{"symbol":"BTC-USD","price":"65000.5"}'


@pytest.fixture
def sample_filled_orders_response():
    return (
        '[{"order_id":"1","filled_size":"0.5","filled_value":"32500.25","filled_fee":"1.2"},'
        '{"order_id":"2","filled_size":"0.1","filled_value":"6500","filled_fee":"0.3"}]'
    )
