"""
SocialBu API Client

This module provides the authenticated HTTP gateway to the SocialBu REST API.
It builds requests with the bearer token, decodes JSON bodies and maps every
non-2xx response to the typed exception hierarchy in utils.exceptions.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests

from config import settings
from data.models import Post
from services.account_service import AccountResource
from services.insights_service import InsightsResource
from services.media_service import MediaResource
from services.post_builder import PostBuilder
from services.post_service import PostResource
from utils.exceptions import (
    AuthenticationError, NotFoundError, RateLimitError, ServerError,
    SocialBuError, ValidationError
)
from utils.logger import get_logger

logger = get_logger(__name__)


class SocialBuClient:
    """Client for the SocialBu API.

    Configuration (token, default account ids, base URL, timeouts) is fixed at
    construction and treated as read-only afterwards.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        account_ids: Iterable[int] = (),
        base_url: str = settings.DEFAULT_BASE_URL,
        timeout: float = 30,
        connect_timeout: float = 10,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            token: API bearer token.
            account_ids: Default account ids for posts that name no targets.
            base_url: API root, e.g. https://socialbu.com/api/v1
            timeout: Read timeout in seconds (longest wait between bytes of the response).
            connect_timeout: Connection timeout in seconds.
            session: Optional requests session (injected in tests).
        """
        self._token = token
        self._account_ids = tuple(int(account_id) for account_id in account_ids)
        self.base_url = base_url
        self.timeout = timeout
        self.connect_timeout = connect_timeout
        self.session = session or requests.Session()

        self._post_resource: Optional[PostResource] = None
        self._account_resource: Optional[AccountResource] = None
        self._media_resource: Optional[MediaResource] = None
        self._insights_resource: Optional[InsightsResource] = None

    @classmethod
    def from_settings(cls, session: Optional[requests.Session] = None) -> "SocialBuClient":
        """Build a client from config.settings (environment / .env)."""
        return cls(
            token=settings.SOCIALBU_TOKEN,
            account_ids=settings.SOCIALBU_ACCOUNT_IDS,
            base_url=settings.SOCIALBU_BASE_URL,
            timeout=settings.SOCIALBU_TIMEOUT,
            connect_timeout=settings.SOCIALBU_CONNECT_TIMEOUT,
            session=session,
        )

    @property
    def http_timeout(self) -> Tuple[float, float]:
        """(connect, read) timeout tuple in the form requests expects."""
        return (self.connect_timeout, self.timeout)

    # =========================================================================
    # Resources
    # =========================================================================

    def posts(self) -> PostResource:
        if self._post_resource is None:
            self._post_resource = PostResource(self)
        return self._post_resource

    def accounts(self) -> AccountResource:
        if self._account_resource is None:
            self._account_resource = AccountResource(self)
        return self._account_resource

    def media(self) -> MediaResource:
        if self._media_resource is None:
            self._media_resource = MediaResource(self, session=self.session, timeout=self.http_timeout)
        return self._media_resource

    def insights(self) -> InsightsResource:
        if self._insights_resource is None:
            self._insights_resource = InsightsResource(self)
        return self._insights_resource

    def create(self) -> PostBuilder:
        return PostBuilder(self)

    def publish(self, content: str, media_path: Optional[str] = None) -> Post:
        """Publish content (and optionally one media file) to the default accounts."""
        builder = self.create().content(content)
        if media_path is not None:
            builder.media(media_path)
        return builder.send()

    def is_configured(self) -> bool:
        return bool(self._token)

    def get_account_ids(self) -> List[int]:
        return list(self._account_ids)

    # =========================================================================
    # HTTP verbs
    # =========================================================================

    def get(self, endpoint: str, query: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request("GET", endpoint, query or {})

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request("POST", endpoint, data or {})

    def patch(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request("PATCH", endpoint, data or {})

    def delete(self, endpoint: str) -> Dict[str, Any]:
        return self._request("DELETE", endpoint, {})

    def _url(self, endpoint: str) -> str:
        return self.base_url.rstrip("/") + "/" + endpoint.lstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token or ''}",
            "Accept": "application/json",
        }

    @staticmethod
    def _query_params(query: Dict[str, Any]) -> Dict[str, Any]:
        """Send list values in bracket form (accounts[]=1&accounts[]=2)."""
        params = {}
        for key, value in query.items():
            if isinstance(value, (list, tuple)):
                params[f"{key}[]"] = list(value)
            else:
                params[key] = value
        return params

    def _request(self, method: str, endpoint: str, data: Dict[str, Any]) -> Dict[str, Any]:
        request_context = {"method": method, "endpoint": endpoint, "data": data}
        kwargs: Dict[str, Any] = {
            "headers": self._headers(),
            "timeout": self.http_timeout,
        }
        if method == "GET":
            kwargs["params"] = self._query_params(data)
        elif method in ("POST", "PATCH"):
            kwargs["json"] = data

        url = self._url(endpoint)
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{method} {endpoint} failed before a response was received: {e}")
            raise SocialBuError(f"Request failed: {e}", request=request_context) from e

        return self._handle_response(response, request_context)

    @staticmethod
    def _decode_body(response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        if isinstance(body, list):
            return {"data": body}
        return body if isinstance(body, dict) else {}

    def _handle_response(self, response, request_context: Dict[str, Any]) -> Dict[str, Any]:
        body = self._decode_body(response)
        status = response.status_code

        if 200 <= status < 300:
            return body

        message = body.get("message") or body.get("error") or "Unknown error"
        logger.warning(
            f"{request_context['method']} {request_context['endpoint']} returned {status}: {message}"
        )

        if status == 401:
            raise AuthenticationError(message, body, request_context)
        if status == 404:
            raise NotFoundError(message, body, request_context)
        if status == 422:
            raise ValidationError(message, body.get("errors") or {}, body, request_context)
        if status == 429:
            raise RateLimitError(message, self._parse_retry_after(response), body, request_context)
        if 500 <= status < 600:
            raise ServerError(message, status, body, request_context)
        raise SocialBuError(message, status, body, request_context)

    @staticmethod
    def _parse_retry_after(response) -> Optional[int]:
        value = response.headers.get("Retry-After")
        if value is None:
            return None
        try:
            return int(str(value).strip())
        except ValueError:
            return None
