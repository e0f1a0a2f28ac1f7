"""
Post Resource

CRUD and pagination helpers for the /posts endpoints.
"""

from typing import Any, Dict, Iterator, List, Optional

from config import settings
from data.models import PaginatedResponse, Post
from services.protocols import SocialBuClientProtocol
from utils.logger import get_logger

logger = get_logger(__name__)


def listing_query(post_type: Optional[str], page: int, per_page: int) -> Dict[str, Any]:
    """Build a listing query, dropping empty values."""
    query = {"type": post_type, "page": page, "per_page": per_page}
    return {key: value for key, value in query.items() if value}


class PostResource:
    """Access to posts through a SocialBu client."""

    def __init__(self, client: SocialBuClientProtocol):
        self.client = client

    def list(self, post_type: Optional[str] = None, page: int = 1,
             per_page: int = settings.DEFAULT_PER_PAGE) -> List[Post]:
        response = self.client.get("/posts", listing_query(post_type, page, per_page))
        items = response.get("data") or response.get("posts") or []
        return [Post.from_dict(item) for item in items]

    def get(self, post_id: int) -> Post:
        response = self.client.get(f"/posts/{post_id}")
        data = response.get("data") or response.get("post") or response
        return Post.from_dict(data)

    def create(
        self,
        content: str,
        account_ids: List[int],
        publish_at: Optional[str] = None,
        attachments: Optional[List[Dict[str, str]]] = None,
        draft: bool = False,
        postback_url: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Post:
        """
        Create a post on one or more accounts.

        The API answers with one post per target account; the first one is
        returned as the canonical result.

        Args:
            content: The post text.
            account_ids: Target account ids.
            publish_at: Schedule time as ``YYYY-MM-DD HH:MM:SS``.
            attachments: Upload token entries, e.g. ``[{"upload_token": "..."}]``.
            draft: Save as draft instead of scheduling.
            postback_url: URL the API calls when the post status changes.
            options: Free-form platform options.

        Returns:
            Post: The created post.
        """
        payload = {
            "content": content,
            "accounts": list(account_ids),
            "publish_at": publish_at,
            "existing_attachments": attachments,
            "draft": True if draft else None,
            "postback_url": postback_url,
            "options": options,
        }
        payload = {key: value for key, value in payload.items() if value is not None}

        response = self.client.post("/posts", payload)

        posts = response.get("posts") or response.get("data")
        if isinstance(posts, list) and posts:
            post = Post.from_dict(posts[0])
        else:
            post = Post.from_dict(response.get("post") or response)

        logger.info(f"Created post {post.id} for accounts {list(account_ids)} (status: {post.status})")
        return post

    def update(self, post_id: int, data: Dict[str, Any]) -> bool:
        response = self.client.patch(f"/posts/{post_id}", data)
        return bool(response.get("success", True))

    def delete(self, post_id: int) -> bool:
        self.client.delete(f"/posts/{post_id}")
        logger.info(f"Deleted post {post_id}")
        return True

    def paginate(self, post_type: Optional[str] = None, page: int = 1,
                 per_page: int = settings.DEFAULT_PER_PAGE) -> PaginatedResponse:
        response = self.client.get("/posts", listing_query(post_type, page, per_page))
        paginated = PaginatedResponse.from_dict(response, "posts")
        return paginated.with_items(paginated.map(Post.from_dict))

    def lazy(self, post_type: Optional[str] = None,
             per_page: int = settings.DEFAULT_PER_PAGE) -> Iterator[Post]:
        """Yield posts page by page until the last page is reached."""
        page = 1
        while True:
            response = self.paginate(post_type, page, per_page)
            yield from response.items
            if not response.has_more_pages():
                break
            page += 1

    def all(self, post_type: Optional[str] = None,
            per_page: int = settings.DEFAULT_ALL_PER_PAGE) -> List[Post]:
        return list(self.lazy(post_type, per_page))
