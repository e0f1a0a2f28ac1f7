"""
Insights Resource

Analytics endpoints: dashboard stats, post counts and metrics, top posts and
per-account metrics.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Union

from data.insights import AccountMetrics, InsightStats, TimeSeriesPoint, TopPost
from services.protocols import SocialBuClientProtocol
from utils.helpers import format_date
from utils.logger import get_logger

logger = get_logger(__name__)

DateLike = Union[str, date]


def _query(**params: Any) -> Dict[str, Any]:
    """Drop None values; booleans are sent as 1/0."""
    query = {}
    for key, value in params.items():
        if value is None:
            continue
        query[key] = int(value) if isinstance(value, bool) else value
    return query


def _items(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Unwrap ``data``; anything other than a non-empty list yields no items."""
    items = response.get("data", response)
    if not isinstance(items, list) or not items:
        return []
    return items


class InsightsResource:
    """Access to analytics through a SocialBu client."""

    def __init__(self, client: SocialBuClientProtocol):
        self.client = client

    def stats(self) -> InsightStats:
        response = self.client.get("/insights/stats")
        return InsightStats.from_dict(response)

    def post_counts(
        self,
        start: DateLike,
        end: DateLike,
        accounts: Optional[Sequence[int]] = None,
        post_type: Optional[str] = None,
        team: Optional[int] = None
    ) -> List[TimeSeriesPoint]:
        query = _query(
            start=format_date(start),
            end=format_date(end),
            accounts=list(accounts) if accounts is not None else None,
            post_type=post_type,
            team=team,
        )
        response = self.client.get("/insights/posts/counts", query)
        return [TimeSeriesPoint.from_dict(point) for point in _items(response)]

    def post_metrics(
        self,
        start: DateLike,
        end: DateLike,
        metrics: Sequence[str],
        post_type: Optional[str] = None,
        accounts: Optional[Sequence[int]] = None,
        team: Optional[int] = None
    ) -> Dict[str, List[TimeSeriesPoint]]:
        """
        Fetch post metric series keyed by metric name.

        An empty response comes back as ``{"data": []}``, which yields an
        empty dict. Series may be nested under ``items``.
        """
        query = _query(
            start=format_date(start),
            end=format_date(end),
            metrics=",".join(metrics),
            post_type=post_type,
            accounts=list(accounts) if accounts is not None else None,
            team=team,
        )
        response = self.client.get("/insights/posts/metrics", query)

        data = response.get("data", response)
        if not isinstance(data, dict) or not data:
            return {}

        series = data.get("items", data)
        if not isinstance(series, dict):
            return {}
        result = {}
        for name, points in series.items():
            if not isinstance(points, list):
                continue
            result[name] = [TimeSeriesPoint.from_dict(point) for point in points]
        return result

    def top_posts(
        self,
        start: DateLike,
        end: DateLike,
        metrics: Sequence[str],
        accounts: Optional[Sequence[int]] = None,
        team: Optional[int] = None
    ) -> List[TopPost]:
        query = _query(
            start=format_date(start),
            end=format_date(end),
            metrics=",".join(metrics),
            accounts=list(accounts) if accounts is not None else None,
            team=team,
        )
        response = self.client.get("/insights/posts/top_posts", query)
        return [TopPost.from_dict(post) for post in _items(response)]

    def account_metrics(
        self,
        start: DateLike,
        end: DateLike,
        metrics: Sequence[str],
        accounts: Optional[Sequence[int]] = None,
        calculate_growth: Optional[bool] = None,
        team: Optional[int] = None
    ) -> List[AccountMetrics]:
        query = _query(
            start=format_date(start),
            end=format_date(end),
            metrics=",".join(metrics),
            accounts=list(accounts) if accounts is not None else None,
            calculate_growth=calculate_growth,
            team=team,
        )
        response = self.client.get("/insights/accounts/metrics", query)
        items = _items(response)
        logger.debug(f"Received metrics for {len(items)} account(s)")
        return [AccountMetrics.from_dict(account) for account in items]
