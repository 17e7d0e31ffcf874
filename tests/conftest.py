"""
Shared fixtures for the product API test suite.

Provides a fake API key, a recording httpx.MockTransport for simulating the
server, and environment variable management.
"""

import os
import sys
from pathlib import Path

import httpx
import pytest

# Ensure the project root is on sys.path so tests can import project modules
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

API_KEY = "sk_live_1234567890abcdef"
MASKED_API_KEY = "sk_live_...cdef"
BASE_URL = "https://api.test/admin/v2"


class RecordingHandler:
    """MockTransport handler that records every request it serves."""

    def __init__(self, respond):
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def api_key():
    return API_KEY


@pytest.fixture
def mock_server():
    """Build (transport, handler) pairs.

    Usage:
        transport, handler = mock_server(lambda req: httpx.Response(200, json={}))
        ... use transport ...
        assert handler.call_count == 1
    """
    def factory(respond=None):
        if respond is None:
            respond = lambda request: httpx.Response(200, json={"success": True})
        handler = RecordingHandler(respond)
        return httpx.MockTransport(handler), handler

    return factory


@pytest.fixture
def make_api(mock_server, api_key):
    """Build a ProductApi wired to a mock server. Returns (api, handler)."""
    from product_api import ProductApi

    def factory(respond=None):
        transport, handler = mock_server(respond)
        return ProductApi(api_key, base_url=BASE_URL, transport=transport), handler

    return factory


@pytest.fixture
def clean_env():
    """Temporarily clear product API env vars to avoid side effects."""
    keys = [
        "PRODUCT_API_KEY", "PRODUCT_API_BASE_URL", "PRODUCT_API_CONFIG",
        "PRODUCT_API_VERBOSE", "PRODUCT_API_NO_COLOR",
    ]
    saved = {}
    for key in keys:
        if key in os.environ:
            saved[key] = os.environ.pop(key)
    yield
    # Restore
    for key, val in saved.items():
        os.environ[key] = val
    for key in keys:
        if key not in saved and key in os.environ:
            del os.environ[key]


@pytest.fixture
def sample_product():
    """A valid add_product payload using the API's field names."""
    return {
        "categoryName": "Accounts",
        "subcategoryName": "Instagram Accounts",
        "sourceProductId": "PROD-123456",
        "name": "Instagram Account - Verified",
        "subproducts": [{
            "sourceProductId": "SUB-123456",
            "sourceName": "Instagram Account 10K",
            "price": 25.99,
            "stock": 100,
            "minQuantity": 1,
        }],
        "description": "Verified Instagram account with 10K followers",
    }
