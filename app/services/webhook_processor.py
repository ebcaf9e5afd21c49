from __future__ import annotations

import logging
from typing import Any, Optional

from app.core.exceptions import WebhookPayloadError
from app.services.subscription_policy import (
    SubscriptionUpdate,
    is_subscription_event,
    resolve_subscription_update,
)
from app.services.user_store import UserStore

logger = logging.getLogger(__name__)


def apply_lemonsqueezy_event(payload: dict[str, Any], store: UserStore) -> Optional[SubscriptionUpdate]:
    """Apply a decoded Lemon Squeezy webhook payload to the user store.

    Raises WebhookPayloadError when no user id can be resolved. Subscription
    events without ``data``/``data.attributes`` objects, or payloads without
    ``meta``, raise before the store is touched.
    """
    meta = payload["meta"]
    event_name = meta.get("event_name")
    custom_data = meta.get("custom_data") or {}
    user_id = custom_data.get("user_id") if isinstance(custom_data, dict) else None
    if not user_id:
        raise WebhookPayloadError("No user_id in custom_data")

    if not is_subscription_event(event_name):
        logger.info("Ignoring webhook event %s for user %s", event_name, user_id)
        return None

    data = payload.get("data")
    if not isinstance(data, dict):
        raise ValueError(f"Webhook {event_name} has no data object")
    attributes = data.get("attributes")
    if not isinstance(attributes, dict):
        raise ValueError(f"Webhook {event_name} has no data.attributes object")
    subscription_id = data.get("id")

    update = resolve_subscription_update(
        event_name,
        attributes.get("status"),
        str(subscription_id) if subscription_id is not None else None,
    )
    if update is None:
        logger.info("Ignoring webhook event %s for user %s", event_name, user_id)
        return None

    store.update_user_subscription(str(user_id), update.is_subscribed, update.subscription_id)
    return update
