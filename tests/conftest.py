"""
Shared Test Fixtures for the SocialBu Client

This module provides common fixtures used across all test modules.
Fixtures include HTTP response factories, a scripted HTTP session that
records every request, an API client wired to it, payload factories
and temporary media files.
"""

import pytest
from unittest.mock import MagicMock, patch
from typing import Optional, Dict, Any, List
import json
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.client import SocialBuClient


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def mock_settings():
    """
    Mock the settings module with test configuration values.

    Usage:
        def test_something(mock_settings):
            mock_settings.SOCIALBU_TOKEN = None
            # ... test code

    Returns:
        MagicMock: A mock settings object with default test values.
    """
    with patch('config.settings') as mock_settings_module:
        mock_settings_module.SOCIALBU_TOKEN = "test-token"
        mock_settings_module.SOCIALBU_ACCOUNT_IDS = [100, 200]
        mock_settings_module.SOCIALBU_INVALID_ACCOUNT_IDS = []
        mock_settings_module.SOCIALBU_BASE_URL = "https://socialbu.com/api/v1"
        mock_settings_module.SOCIALBU_TIMEOUT = 30
        mock_settings_module.SOCIALBU_CONNECT_TIMEOUT = 10
        mock_settings_module.SOCIALBU_WEBHOOKS_ENABLED = False
        mock_settings_module.SOCIALBU_WEBHOOKS_PREFIX = "webhooks/socialbu"
        mock_settings_module.SOCIALBU_WEBHOOK_SECRET = None

        with patch('services.client.settings', mock_settings_module):
            yield mock_settings_module


# =============================================================================
# Logging Fixtures
# =============================================================================

@pytest.fixture
def capture_logs():
    """
    Capture log messages for assertion in tests.

    Returns:
        list: A list that will contain captured log records.
    """
    import logging

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

    handler = LogCapture()
    handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(handler)

    yield handler.records

    root_logger.removeHandler(handler)
    root_logger.setLevel(original_level)


# =============================================================================
# HTTP Fixtures
# =============================================================================

def make_response(
    status_code: int = 200,
    json_data: Optional[Any] = None,
    content: bytes = b'',
    text: str = '',
    headers: Optional[Dict[str, str]] = None
) -> MagicMock:
    """
    Create a mock HTTP response object mimicking requests.Response.

    Args:
        status_code: HTTP status code (default 200).
        json_data: Value returned from response.json(); when None, json() raises ValueError.
        content: Raw bytes content, also served by iter_content().
        text: Text content (auto-generated from json_data if not provided).
        headers: Response headers dictionary.
    """
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.content = content
    mock_response.headers = headers if headers is not None else {'Content-Type': 'application/json'}
    mock_response.ok = 200 <= status_code < 400

    if text:
        mock_response.text = text
    elif json_data is not None:
        mock_response.text = json.dumps(json_data)
    else:
        mock_response.text = content.decode('utf-8', errors='replace') if content else ''

    if json_data is not None:
        mock_response.json.return_value = json_data
    else:
        mock_response.json.side_effect = ValueError("No JSON data")

    mock_response.iter_content.return_value = [content] if content else []

    return mock_response


@pytest.fixture
def mock_http_response():
    """
    Factory fixture for creating mock HTTP responses.

    Usage:
        def test_http_request(mock_http_response):
            response = mock_http_response(status_code=200, json_data={'key': 'value'})
    """
    return make_response


class ScriptedSession:
    """
    Stand-in for requests.Session that answers from a route table.

    Routes match on HTTP method and the end of the URL path (query string
    ignored). A route holding several responses serves them in order and
    repeats the last one. Exceptions in the table are raised instead.
    """

    def __init__(self):
        self.routes: List[List[Any]] = []
        self.calls: List[Dict[str, Any]] = []

    def add(self, method: str, path: str, *responses) -> "ScriptedSession":
        self.routes.append([method.upper(), path, list(responses)])
        return self

    def request(self, method: str, url: str, **kwargs):
        method = method.upper()
        self.calls.append({'method': method, 'url': url, **kwargs})
        bare_url = url.split('?')[0]
        for route_method, path, responses in self.routes:
            if route_method == method and bare_url.endswith(path):
                response = responses.pop(0) if len(responses) > 1 else responses[0]
                if isinstance(response, BaseException):
                    raise response
                return response
        raise AssertionError(f"Unexpected request: {method} {url}")

    def get(self, url, **kwargs):
        return self.request('GET', url, **kwargs)

    def head(self, url, **kwargs):
        return self.request('HEAD', url, **kwargs)

    def post(self, url, **kwargs):
        return self.request('POST', url, **kwargs)

    def put(self, url, **kwargs):
        return self.request('PUT', url, **kwargs)

    def calls_to(self, method: str, path: str) -> List[Dict[str, Any]]:
        return [
            call for call in self.calls
            if call['method'] == method.upper() and call['url'].split('?')[0].endswith(path)
        ]


@pytest.fixture
def session():
    """A fresh ScriptedSession with no routes."""
    return ScriptedSession()


@pytest.fixture
def api_client(session):
    """A SocialBuClient with default accounts [100, 200] talking to the scripted session."""
    return SocialBuClient(token="test-token", account_ids=[100, 200], session=session)


# =============================================================================
# Upload Fixtures
# =============================================================================

SIGNED_URL = "https://storage.example.com/uploads/abc?X-Amz-Signature=sig"


def script_upload(session: ScriptedSession, upload_token: str = "tok-123",
                  storage_status: int = 200) -> ScriptedSession:
    """Script a successful three-step upload (storage status is configurable)."""
    session.add('POST', '/upload_media', make_response(json_data={
        'signed_url': SIGNED_URL,
        'key': 'uploads/abc',
        'url': 'https://cdn.example.com/abc',
        'secure_key': 'secure-abc',
    }))
    session.add('PUT', 'storage.example.com/uploads/abc',
                make_response(status_code=storage_status, text='' if storage_status < 300 else 'AccessDenied'))
    session.add('GET', '/upload_media/status', make_response(json_data={'upload_token': upload_token}))
    return session


@pytest.fixture
def media_file(tmp_path):
    """
    Create a small local media file.

    Returns:
        str: Path of the file ("photo.jpg").
    """
    path = tmp_path / "photo.jpg"
    path.write_bytes(b"fake image bytes")
    return str(path)


# =============================================================================
# Payload Factories
# =============================================================================

@pytest.fixture
def account_payload():
    """Factory for API account payloads."""
    def _create(**overrides) -> Dict[str, Any]:
        data = {
            'id': 100,
            'name': 'Test Page',
            'type': 'facebook.page',
            'status': 'active',
        }
        data.update(overrides)
        return data

    return _create


@pytest.fixture
def post_payload():
    """Factory for API post payloads."""
    def _create(**overrides) -> Dict[str, Any]:
        data = {
            'id': 1,
            'content': 'Hello world',
            'status': 'published',
            'account_ids': [100],
            'created_at': '2025-01-15 10:00:00',
        }
        data.update(overrides)
        return data

    return _create
