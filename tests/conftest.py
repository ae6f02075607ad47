from unittest.mock import AsyncMock, MagicMock

import pytest

from b2browse.b2_auth import B2Session
from b2browse.config import BrowseConfig


@pytest.fixture
def b2_session():
    return B2Session(
        api_url="https://api001.backblazeb2.com",
        authorization_token="tok-123",
        download_url="https://f001.backblazeb2.com",
        bucket_id="bucket-1",
    )


@pytest.fixture
def browse_config():
    return BrowseConfig(
        content_base_url="https://files.example.com",
        directory_host=None,
        cache_seconds=3600,
        max_entries=10000,
        request_timeout=15.0,
    )


def make_response(status_code=200, json_data=None, json_error=None):
    """A stand-in for ``httpx.Response``."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.is_success = 200 <= status_code < 300
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = json_data
    return resp


def make_async_client(**methods):
    """Mock ``httpx.AsyncClient`` instance usable as an async context manager."""
    client = AsyncMock()
    for name, value in methods.items():
        if isinstance(value, Exception):
            setattr(client, name, AsyncMock(side_effect=value))
        else:
            setattr(client, name, AsyncMock(return_value=value))
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client
