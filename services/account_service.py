"""
Account Resource

Read access to the connected social accounts (/accounts endpoints).
"""

from typing import Iterator, List, Optional

from config import settings
from data.models import Account, PaginatedResponse
from services.post_service import listing_query
from services.protocols import SocialBuClientProtocol
from utils.logger import get_logger

logger = get_logger(__name__)


class AccountResource:
    """Access to accounts through a SocialBu client."""

    def __init__(self, client: SocialBuClientProtocol):
        self.client = client

    def list(self, account_type: Optional[str] = None, page: int = 1,
             per_page: int = settings.DEFAULT_PER_PAGE) -> List[Account]:
        response = self.client.get("/accounts", listing_query(account_type, page, per_page))
        items = response.get("accounts") or response.get("items") or response.get("data") or []
        return [Account.from_dict(item) for item in items]

    def get(self, account_id: int) -> Account:
        """
        Fetch a single account, including its capability fields.

        Args:
            account_id: The account id.

        Returns:
            Account: The parsed account.

        Raises:
            NotFoundError: If the account does not exist.
        """
        logger.debug(f"Fetching account {account_id}")
        response = self.client.get(f"/accounts/{account_id}")
        data = response.get("account") or response.get("data") or response
        return Account.from_dict(data)

    def paginate(self, account_type: Optional[str] = None, page: int = 1,
                 per_page: int = settings.DEFAULT_PER_PAGE) -> PaginatedResponse:
        response = self.client.get("/accounts", listing_query(account_type, page, per_page))
        paginated = PaginatedResponse.from_dict(response, "accounts")
        return paginated.with_items(paginated.map(Account.from_dict))

    def lazy(self, account_type: Optional[str] = None,
             per_page: int = settings.DEFAULT_PER_PAGE) -> Iterator[Account]:
        page = 1
        while True:
            response = self.paginate(account_type, page, per_page)
            yield from response.items
            if not response.has_more_pages():
                break
            page += 1

    def all(self, account_type: Optional[str] = None,
            per_page: int = settings.DEFAULT_ALL_PER_PAGE) -> List[Account]:
        """Fetch every account across all pages."""
        return list(self.lazy(account_type, per_page))
