"""
Webhook Payload Parsing

Inbound webhook bodies are flat JSON objects. Older deliveries wrap the fields
one level under ``data``; that wrapper is removed transparently.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from utils.helpers import first_present


def _optional_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class WebhookPayload:
    data: Dict[str, Any]

    @classmethod
    def from_dict(cls, body: Dict[str, Any]) -> "WebhookPayload":
        wrapped = body.get("data")
        return cls(data=wrapped if isinstance(wrapped, dict) else body)

    @property
    def post_id(self) -> Optional[int]:
        return _optional_int(self.data.get("post_id"))

    @property
    def account_id(self) -> Optional[int]:
        return _optional_int(self.data.get("account_id"))

    @property
    def status(self) -> Optional[str]:
        return self.data.get("status")

    @property
    def account_action(self) -> Optional[str]:
        return first_present(self.data, "account_action", "action")

    @property
    def account_type(self) -> str:
        return first_present(self.data, "account_type", "type", "platform", default="unknown")

    @property
    def account_name(self) -> str:
        return first_present(self.data, "account_name", "name", default="")
