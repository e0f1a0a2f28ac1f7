"""
Insights Data Models

Value objects for the analytics endpoints: time series points, per-post
insights, top posts, per-account metrics and the dashboard stats summary.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from utils.helpers import first_present

Number = Union[int, float]


@dataclass(frozen=True)
class TimeSeriesPoint:
    """A single dated value; counts endpoints report it as ``count``."""
    date: str
    value: Number

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimeSeriesPoint":
        return cls(
            date=data.get("date") or "",
            value=first_present(data, "value", "count", default=0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "value": self.value}


@dataclass(frozen=True)
class PostInsight:
    type: str
    value: Number

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PostInsight":
        return cls(type=data.get("type") or "", value=data.get("value") or 0)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "value": self.value}


@dataclass(frozen=True)
class TopPost:
    """A top-performing post with its insight values."""
    id: int
    content: str
    account_id: int
    account_type: str
    type: str
    attachments: Optional[List[Dict[str, Any]]] = None
    publish_at: Optional[str] = None
    published_at: Optional[str] = None
    published: bool = False
    permalink: Optional[str] = None
    insights: List[PostInsight] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TopPost":
        return cls(
            id=int(data.get("id") or 0),
            content=data.get("content") or "",
            account_id=int(first_present(data, "account_id", "accountId", default=0)),
            account_type=first_present(data, "account_type", "accountType", default=""),
            type=data.get("type") or "",
            attachments=data.get("attachments"),
            publish_at=first_present(data, "publish_at", "publishAt"),
            published_at=first_present(data, "published_at", "publishedAt"),
            published=bool(data.get("published", False)),
            permalink=data.get("permalink"),
            insights=[PostInsight.from_dict(item) for item in data.get("insights") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "content": self.content,
            "account_id": self.account_id,
            "account_type": self.account_type,
            "type": self.type,
            "attachments": self.attachments,
            "publish_at": self.publish_at,
            "published_at": self.published_at,
            "published": self.published,
            "permalink": self.permalink,
            "insights": [insight.to_dict() for insight in self.insights],
        }
        return {key: value for key, value in data.items() if value is not None}

    def insight_value(self, insight_type: str) -> Optional[Number]:
        """Return the value of the first insight of the given type, or None."""
        for insight in self.insights:
            if insight.type == insight_type:
                return insight.value
        return None


@dataclass(frozen=True)
class AccountMetrics:
    """Named metric series for one account."""
    account_id: int
    metrics: Dict[str, List[TimeSeriesPoint]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AccountMetrics":
        metrics = {
            name: [TimeSeriesPoint.from_dict(point) for point in points]
            for name, points in (data.get("metrics") or {}).items()
        }
        return cls(
            account_id=int(first_present(data, "account_id", "accountId", default=0)),
            metrics=metrics,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id,
            "metrics": {
                name: [point.to_dict() for point in points]
                for name, points in self.metrics.items()
            },
        }

    def metric(self, name: str) -> Optional[List[TimeSeriesPoint]]:
        return self.metrics.get(name)


@dataclass(frozen=True)
class InsightStats:
    """Dashboard counters for the authenticated user."""
    unread_feeds: int = 0
    user_automations: int = 0
    user_pending_posts: int = 0
    user_failed_posts: int = 0
    inactive_accounts: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InsightStats":
        return cls(
            unread_feeds=int(first_present(data, "unreadFeeds", "unread_feeds", default=0)),
            user_automations=int(first_present(data, "userAutomations", "user_automations", default=0)),
            user_pending_posts=int(first_present(data, "userPendingPosts", "user_pending_posts", default=0)),
            user_failed_posts=int(first_present(data, "userFailedPosts", "user_failed_posts", default=0)),
            inactive_accounts=int(first_present(data, "inactiveAccounts", "inactive_accounts", default=0)),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "unreadFeeds": self.unread_feeds,
            "userAutomations": self.user_automations,
            "userPendingPosts": self.user_pending_posts,
            "userFailedPosts": self.user_failed_posts,
            "inactiveAccounts": self.inactive_accounts,
        }

    def has_issues(self) -> bool:
        return self.user_failed_posts > 0 or self.inactive_accounts > 0
