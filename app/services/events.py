"""
Guest change notifications.

Every successful write to the guest directory publishes a ``GuestEvent`` so
views that show guest data (dashboard list, messages, RSVP counts) can
refresh. Subscribers are called synchronously in subscription order.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

GUEST_CREATED = "guest.created"
GUEST_UPDATED = "guest.updated"
GUEST_DELETED = "guest.deleted"
GUEST_RSVP = "guest.rsvp"


@dataclass
class GuestEvent:
    type: str
    guest_id: str
    status: Optional[str] = None
    timestamp: str = field(default_factory=lambda: datetime.utcnow().isoformat())

    def to_message(self) -> dict:
        return {
            "type": self.type,
            "guestId": self.guest_id,
            "status": self.status,
            "timestamp": self.timestamp,
        }


Subscriber = Callable[[GuestEvent], None]


class GuestEventBus:
    """Publish/subscribe channel for guest data changes"""

    def __init__(self):
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: GuestEvent) -> None:
        logger.info(f"Guest event {event.type} for {event.guest_id}")
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception as e:
                # Subscriber failures never reach the writer
                logger.error(f"Guest event subscriber failed: {e}")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)


# Global event bus instance
guest_events = GuestEventBus()
