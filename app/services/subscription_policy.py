from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

ACTIVE_STATUSES = frozenset({"active", "past_due", "on_trial"})
STATUS_EVENTS = frozenset({"subscription_created", "subscription_updated"})
ENDING_EVENTS = frozenset({"subscription_cancelled", "subscription_expired"})


@dataclass(frozen=True)
class SubscriptionUpdate:
    is_subscribed: bool
    subscription_id: Optional[str]


def resolve_subscription_update(
    event_name: Optional[str],
    status: Optional[str],
    subscription_id: Optional[str],
) -> Optional[SubscriptionUpdate]:
    """Map a Lemon Squeezy subscription event to the stored flag.

    Returns None for events that do not touch subscription state.
    """
    if event_name in STATUS_EVENTS:
        return SubscriptionUpdate(
            is_subscribed=status in ACTIVE_STATUSES,
            subscription_id=subscription_id,
        )
    if event_name in ENDING_EVENTS:
        # The ending subscription's id still replaces the stored one.
        return SubscriptionUpdate(is_subscribed=False, subscription_id=subscription_id)
    return None


def is_subscription_event(event_name: Optional[str]) -> bool:
    return event_name in STATUS_EVENTS or event_name in ENDING_EVENTS
