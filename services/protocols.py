"""
Service Protocol Definitions

This module defines the typing.Protocol interface shared by the real API client
and the in-memory fake used in tests. Builders and resources depend on this
protocol only, so either implementation can be injected.
"""

from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from data.models import Post


@runtime_checkable
class SocialBuClientProtocol(Protocol):
    """Protocol defining the SocialBu client contract.

    Implementations should provide:
    - Resource accessors (posts, accounts, media, insights)
    - Post composition entry points (create, publish)
    - Raw authenticated HTTP verbs returning decoded JSON bodies
    """

    def posts(self) -> Any:
        """Return the posts resource."""
        ...

    def accounts(self) -> Any:
        """Return the accounts resource."""
        ...

    def media(self) -> Any:
        """Return the media upload resource."""
        ...

    def insights(self) -> Any:
        """Return the analytics resource."""
        ...

    def create(self) -> Any:
        """Start composing a post with a fresh PostBuilder."""
        ...

    def publish(self, content: str, media_path: Optional[str] = None) -> Post:
        """Publish content (and optionally one media file) to the default accounts.

        Args:
            content: The post text.
            media_path: Optional local path or URL of a media file.

        Returns:
            The created Post.
        """
        ...

    def is_configured(self) -> bool:
        """Check whether an API token is available."""
        ...

    def get_account_ids(self) -> List[int]:
        """Return the default account ids used when a post names none."""
        ...

    def get(self, endpoint: str, query: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...

    def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...

    def patch(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...

    def delete(self, endpoint: str) -> Dict[str, Any]:
        ...
