"""
Data Models for the SocialBu Client

This module contains the value objects returned by the API resources and
the transient file handle used by the media upload pipeline.

Response payloads are not consistent about key naming (snake_case vs
camelCase, legacy names), so each model declares its accepted aliases per
field in one table and resolves them once in ``from_dict``.
"""

import os
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, BinaryIO, Callable, Dict, Generic, Iterator, List, Optional, TypeVar

from utils.helpers import first_present, format_datetime, is_future, optional_int, parse_datetime

T = TypeVar("T")
U = TypeVar("U")


def _without_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


# =============================================================================
# Account
# =============================================================================

ACCOUNT_ALIASES = {
    "type": ("type", "platform"),
    "profile_url": ("profile_url", "profileUrl"),
    "avatar_url": ("avatar_url", "avatarUrl", "avatar", "image"),
    "extra_data": ("extra_data", "extraData"),
    "post_max_length": ("post_maxlength", "postMaxLength"),
    "max_attachments": ("max_attachments", "maxAttachments"),
    "attachment_types": ("attachment_types", "attachmentTypes"),
    "post_media_required": ("post_media_required", "postMediaRequired"),
}

# Platforms that reject text-only posts unless the account says otherwise
MEDIA_REQUIRED_PLATFORMS = ("instagram", "tiktok", "pinterest")


@dataclass(frozen=True)
class Account:
    """A connected social destination and its declared posting capabilities."""
    id: int
    name: str
    type: str = "unknown"                       # e.g. "facebook.page", "twitter.profile"
    status: str = "active"
    username: Optional[str] = None
    profile_url: Optional[str] = None
    avatar_url: Optional[str] = None
    extra_data: Optional[Dict[str, Any]] = None
    post_max_length: Optional[int] = None       # None = unlimited
    max_attachments: Optional[int] = None       # None = unlimited
    attachment_types: Optional[List[str]] = None
    post_media_required: Optional[bool] = None  # None = infer from platform type

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        aliases = ACCOUNT_ALIASES

        status = data.get("status")
        if status is None:
            if data.get("active") is not None:
                status = "active" if data["active"] else "inactive"
            else:
                status = "active"

        media_required = first_present(data, *aliases["post_media_required"])

        return cls(
            id=int(data.get("id") or 0),
            name=data.get("name") or "",
            type=first_present(data, *aliases["type"], default="unknown"),
            status=status,
            username=data.get("username"),
            profile_url=first_present(data, *aliases["profile_url"]),
            avatar_url=first_present(data, *aliases["avatar_url"]),
            extra_data=first_present(data, *aliases["extra_data"]),
            post_max_length=optional_int(first_present(data, *aliases["post_max_length"])),
            max_attachments=optional_int(first_present(data, *aliases["max_attachments"])),
            attachment_types=first_present(data, *aliases["attachment_types"]),
            post_media_required=None if media_required is None else bool(media_required),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _without_none({
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "status": self.status,
            "username": self.username,
            "profile_url": self.profile_url,
            "avatar_url": self.avatar_url,
            "extra_data": self.extra_data,
            "post_maxlength": self.post_max_length,
            "max_attachments": self.max_attachments,
            "attachment_types": self.attachment_types,
            "post_media_required": self.post_media_required,
        })

    def _is_platform(self, *platforms: str) -> bool:
        return any(
            self.type == platform or self.type.startswith(f"{platform}.")
            for platform in platforms
        )

    def is_active(self) -> bool:
        return self.status == "active"

    def is_facebook(self) -> bool:
        return self._is_platform("facebook")

    def is_instagram(self) -> bool:
        return self._is_platform("instagram")

    def is_twitter(self) -> bool:
        return self._is_platform("twitter", "x")

    def is_linkedin(self) -> bool:
        return self._is_platform("linkedin")

    def is_tiktok(self) -> bool:
        return self._is_platform("tiktok")

    def is_pinterest(self) -> bool:
        return self._is_platform("pinterest")

    def requires_media(self) -> bool:
        """
        Whether a post to this account needs at least one attachment.

        An explicit flag from the API wins, including an explicit False.
        """
        if self.post_media_required is not None:
            return self.post_media_required
        return self._is_platform(*MEDIA_REQUIRED_PLATFORMS)


# =============================================================================
# Post
# =============================================================================

POST_STATUSES = ("draft", "scheduled", "published", "awaiting_approval", "failed")


def _derive_post_status(data: Dict[str, Any]) -> str:
    """Infer a post status from its flags when the server omits ``status``."""
    if data.get("draft"):
        return "draft"
    if data.get("published"):
        return "published"
    if data.get("approved") is False:
        return "awaiting_approval"
    if data.get("publish_at") is not None:
        return "scheduled"
    return "draft"


def _parse_post_account_ids(data: Dict[str, Any]) -> List[int]:
    if data.get("account_ids") is not None:
        return [int(account_id) for account_id in data["account_ids"]]
    if data.get("account_id") is not None:
        return [int(data["account_id"])]
    if data.get("accounts") is not None:
        return [
            int(account["id"]) if isinstance(account, dict) else int(account)
            for account in data["accounts"]
        ]
    return []


@dataclass(frozen=True)
class Post:
    """A post as created or fetched from the API."""
    id: int
    content: str
    status: str
    account_ids: List[int] = field(default_factory=list)
    publish_at: Optional[datetime] = None
    attachments: Optional[List[Dict[str, Any]]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Post":
        return cls(
            id=int(data.get("id") or 0),
            content=data.get("content") or "",
            status=data.get("status") or _derive_post_status(data),
            account_ids=_parse_post_account_ids(data),
            publish_at=parse_datetime(data.get("publish_at")),
            attachments=data.get("attachments"),
            created_at=parse_datetime(data.get("created_at")),
            updated_at=parse_datetime(data.get("updated_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _without_none({
            "id": self.id,
            "content": self.content,
            "status": self.status,
            "account_ids": list(self.account_ids),
            "publish_at": format_datetime(self.publish_at),
            "attachments": self.attachments,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        })

    def is_scheduled(self) -> bool:
        return self.publish_at is not None and is_future(self.publish_at)

    def is_published(self) -> bool:
        return self.status == "published"

    def is_draft(self) -> bool:
        return self.status == "draft"


# =============================================================================
# Media
# =============================================================================

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class MediaUpload:
    """Result of a confirmed upload; only the token is needed to attach it to a post."""
    upload_token: str
    key: str = ""
    url: str = ""
    secure_key: str = ""
    mime_type: str = DEFAULT_MIME_TYPE
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MediaUpload":
        return cls(
            upload_token=first_present(data, "upload_token", "uploadToken", default=""),
            key=data.get("key") or "",
            url=data.get("url") or "",
            secure_key=first_present(data, "secure_key", "secureKey", default=""),
            mime_type=first_present(data, "mime_type", "mimeType", default=DEFAULT_MIME_TYPE),
            name=data.get("name") or "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "upload_token": self.upload_token,
            "key": self.key,
            "url": self.url,
            "secure_key": self.secure_key,
            "mime_type": self.mime_type,
            "name": self.name,
        }

    def to_attachment(self) -> Dict[str, str]:
        return {"upload_token": self.upload_token}

    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")


@dataclass
class ResolvedFile:
    """
    A media input ready for transfer.

    Use as a context manager; ``close()`` releases the stream and, for remote
    downloads, removes the backing temp file. Closing twice is a no-op.
    """
    name: str
    mime_type: str
    size: int
    stream: BinaryIO
    path: str
    is_temporary: bool = False
    _closed: bool = field(default=False, init=False, repr=False)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.stream.close()
        finally:
            if self.is_temporary and os.path.exists(self.path):
                os.unlink(self.path)

    def __enter__(self) -> "ResolvedFile":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


# =============================================================================
# Pagination
# =============================================================================

@dataclass(frozen=True)
class PaginatedResponse(Generic[T]):
    """One page of a listing plus its pagination metadata."""
    items: List[T]
    current_page: int = 1
    last_page: int = 1
    per_page: int = 15
    total: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any], items_key: str = "data") -> "PaginatedResponse":
        """
        Parse a listing response.

        Metadata is read from ``pagination``, then ``meta``, then the body itself;
        items from ``items_key``, then ``items``, then ``data``.
        """
        pagination = first_present(data, "pagination", "meta", default=data)
        items = first_present(data, items_key, "items", "data", default=[])
        return cls(
            items=list(items),
            current_page=int(first_present(pagination, "currentPage", "current_page", default=1)),
            last_page=int(first_present(pagination, "lastPage", "last_page", default=1)),
            per_page=int(first_present(pagination, "perPage", "per_page", default=15)),
            total=int(first_present(pagination, "total", default=len(items))),
        )

    def with_items(self, items: List[U]) -> "PaginatedResponse[U]":
        """Return the same page metadata around different items."""
        return replace(self, items=list(items))

    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    def next_page(self) -> Optional[int]:
        return self.current_page + 1 if self.has_more_pages() else None

    def previous_page(self) -> Optional[int]:
        return self.current_page - 1 if self.current_page > 1 else None

    def is_first_page(self) -> bool:
        return self.current_page == 1

    def is_last_page(self) -> bool:
        return self.current_page == self.last_page

    def is_empty(self) -> bool:
        return not self.items

    def count(self) -> int:
        return len(self.items)

    def map(self, callback: Callable[[T], U]) -> List[U]:
        return [callback(item) for item in self.items]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)
