"""
Webhook Domain Events

Typed events emitted by the webhook receiver, and a small synchronous
dispatcher that delivers them to subscribed handlers.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Callable, DefaultDict, Dict, List, Type

from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PostStatusChanged:
    """A post changed status (published, failed, ...)."""
    post_id: int
    account_id: int
    status: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AccountStatusChanged:
    """A connected account was added, updated or disconnected."""
    account_id: int
    account_type: str
    account_name: str
    action: str
    payload: Dict[str, Any] = field(default_factory=dict)


Handler = Callable[[Any], None]


class EventDispatcher:
    """Delivers events to the handlers subscribed to their exact type."""

    def __init__(self):
        self._handlers: DefaultDict[Type, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type, handler: Handler) -> Handler:
        """Register a handler for an event type and return the handler."""
        self._handlers[event_type].append(handler)
        return handler

    def handlers_for(self, event_type: Type) -> List[Handler]:
        return list(self._handlers.get(event_type, []))

    def dispatch(self, event: Any) -> int:
        """
        Deliver an event to its handlers in subscription order.

        A failing handler is logged and does not prevent the remaining
        handlers from running.

        Returns:
            int: Number of handlers that completed successfully.
        """
        delivered = 0
        for handler in self.handlers_for(type(event)):
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                logger.error(f"Webhook handler {handler!r} failed for {type(event).__name__}: {e}", exc_info=True)
        return delivered
