"""
Capability Validator Module

Cross-checks a draft post against the declared limits of each target account
(maximum content length, maximum attachment count, media requirement) before
any upload or create call is made.
"""

from typing import Dict, Iterable, List, Mapping, Optional

from data.models import Account
from services.protocols import SocialBuClientProtocol
from utils.exceptions import ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)

FieldErrors = Dict[str, List[str]]


def check_account_capabilities(content: str, media_count: int, account: Account) -> FieldErrors:
    """
    Check a draft against one account's capabilities.

    Args:
        content: The post text; length is counted in characters, not bytes.
        media_count: Number of attached media items.
        account: The target account.

    Returns:
        Mapping of field name to error messages; empty when the draft fits.
    """
    errors: FieldErrors = {}

    if account.post_max_length is not None:
        length = len(content)
        if length > account.post_max_length:
            errors.setdefault("content", []).append(
                f"Content ({length} chars) exceeds limit for {account.name} "
                f"(max {account.post_max_length})."
            )

    if account.requires_media() and media_count == 0:
        errors.setdefault("media", []).append(
            f"{account.name} requires at least one media attachment."
        )

    if account.max_attachments is not None and media_count > account.max_attachments:
        errors.setdefault("attachments", []).append(
            f"Too many attachments for {account.name} "
            f"(max {account.max_attachments}, got {media_count})."
        )

    return errors


class CapabilityValidator:
    """Validates drafts against account capabilities, fetching unknown accounts on demand."""

    def __init__(self, client: SocialBuClientProtocol):
        self.client = client

    def resolve_account(self, account_id: int, known: Optional[Mapping[int, Account]] = None) -> Account:
        if known and account_id in known:
            return known[account_id]
        return self.client.accounts().get(account_id)

    def validate(
        self,
        content: str,
        media_count: int,
        account_ids: Iterable[int],
        known_accounts: Optional[Mapping[int, Account]] = None
    ) -> None:
        """
        Validate a draft against every target account.

        Errors accumulate across all accounts before anything is raised.

        Raises:
            ValidationError: Grouping every field error found.
        """
        errors: FieldErrors = {}
        for account_id in account_ids:
            account = self.resolve_account(account_id, known_accounts)
            for field, messages in check_account_capabilities(content, media_count, account).items():
                errors.setdefault(field, []).extend(messages)

        if errors:
            logger.warning(f"Capability validation failed: {errors}")
            raise ValidationError("Account capability validation failed.", errors)
