"""
Post Builder Module

Fluent composition of a post. The builder accumulates content, media sources,
target accounts, schedule and options, then either returns the payload that
would be sent (``dry_run``) or validates, uploads media and creates the post
(``send``).

Usage:
    post = (client.create()
            .content("Hello!")
            .media("/path/to/photo.jpg")
            .to(123, 456)
            .scheduled_at("2025-06-15 14:00:00")
            .send())
"""

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from data.models import Account, Post
from services.capability_validator import CapabilityValidator
from services.protocols import SocialBuClientProtocol
from utils.exceptions import ValidationError
from utils.helpers import format_datetime, parse_datetime, unique_ids
from utils.logger import get_logger

logger = get_logger(__name__)

ScheduleInput = Union[str, datetime, date, int, float]


def normalize_publish_at(value: ScheduleInput) -> str:
    """
    Normalize a schedule time to ``YYYY-MM-DD HH:MM:SS``.

    Accepts datetime/date objects, epoch seconds and ISO-8601 strings.

    Raises:
        ValidationError: If the value cannot be understood as a timestamp.
    """
    if isinstance(value, bool):
        raise ValidationError("Validation failed.", {"publish_at": [f"Invalid schedule time: {value!r}"]})
    try:
        parsed = parse_datetime(value)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise ValidationError(
            "Validation failed.", {"publish_at": [f"Invalid schedule time: {value!r}"]}
        ) from e
    if parsed is None:
        raise ValidationError("Validation failed.", {"publish_at": ["Schedule time is empty."]})
    return format_datetime(parsed)


class PostBuilder:
    """Fluent builder for a single post. Every setter returns the builder."""

    def __init__(self, client: SocialBuClientProtocol, validator: Optional[CapabilityValidator] = None):
        self.client = client
        self.validator = validator or CapabilityValidator(client)

        self._content = ""
        self._media_paths: List[str] = []
        self._account_ids: List[int] = []
        self._accounts: Dict[int, Account] = {}
        self._publish_at: Optional[str] = None
        self._draft = False
        self._postback_url: Optional[str] = None
        self._options: Optional[Dict[str, Any]] = None

    def content(self, content: str) -> "PostBuilder":
        self._content = content
        return self

    def media(self, path: str) -> "PostBuilder":
        """Append a local path or URL; files upload in the order added."""
        self._media_paths.append(path)
        return self

    def to(self, *account_ids: Union[int, Iterable[int]]) -> "PostBuilder":
        """Add target account ids, given individually or as collections."""
        for account_id in account_ids:
            if isinstance(account_id, Iterable) and not isinstance(account_id, (str, bytes)):
                self._account_ids.extend(int(item) for item in account_id)
            else:
                self._account_ids.append(int(account_id))
        return self

    def to_accounts(self, *accounts: Account) -> "PostBuilder":
        """Add pre-fetched accounts; their capabilities are used without an API lookup."""
        for account in accounts:
            self._accounts[account.id] = account
            self._account_ids.append(account.id)
        return self

    def scheduled_at(self, when: ScheduleInput) -> "PostBuilder":
        self._publish_at = normalize_publish_at(when)
        return self

    def schedule(self, when: ScheduleInput) -> "PostBuilder":
        return self.scheduled_at(when)

    def as_draft(self) -> "PostBuilder":
        self._draft = True
        return self

    def with_postback_url(self, url: str) -> "PostBuilder":
        self._postback_url = url
        return self

    def with_options(self, options: Dict[str, Any]) -> "PostBuilder":
        self._options = options
        return self

    def resolve_account_ids(self) -> List[int]:
        """Explicit ids (de-duplicated, first occurrence wins), else the client defaults."""
        if self._account_ids:
            return unique_ids(self._account_ids)
        return list(self.client.get_account_ids())

    def dry_run(self) -> Dict[str, Any]:
        """
        Return the payload that would be sent, without any network call.

        Only required fields are validated; account capabilities are not, so a
        successful dry run does not guarantee that ``send()`` will pass.
        """
        self._validate_required()
        payload = {
            "content": self._content,
            "accounts": self.resolve_account_ids(),
            "publish_at": self._publish_at,
            "pending_uploads": list(self._media_paths) or None,
            "draft": True if self._draft else None,
            "postback_url": self._postback_url,
            "options": self._options,
        }
        return {key: value for key, value in payload.items() if value is not None}

    def send(self) -> Post:
        """
        Validate, upload pending media in order, then create the post.

        Returns:
            Post: The created post.

        Raises:
            ValidationError: Missing content/accounts, or a capability violation.
            MediaUploadError: If any media upload step fails.
            SocialBuError: If the create call fails.
        """
        self._validate_required()
        account_ids = self.resolve_account_ids()
        self.validator.validate(self._content, len(self._media_paths), account_ids, self._accounts)

        attachments = self._upload_media()

        return self.client.posts().create(
            content=self._content,
            account_ids=account_ids,
            publish_at=self._publish_at,
            attachments=attachments,
            draft=self._draft,
            postback_url=self._postback_url,
            options=self._options,
        )

    def _validate_required(self) -> None:
        errors: Dict[str, List[str]] = {}

        if not self._content.strip():
            errors["content"] = ["Content is required."]

        if not self.resolve_account_ids():
            errors["accounts"] = ["At least one account ID is required."]

        if errors:
            raise ValidationError("Validation failed.", errors)

    def _upload_media(self) -> Optional[List[Dict[str, str]]]:
        if not self._media_paths:
            return None

        attachments = []
        media = self.client.media()
        for path in self._media_paths:
            upload = media.upload(path)
            attachments.append(upload.to_attachment())
        logger.debug(f"Uploaded {len(attachments)} attachment(s)")
        return attachments
