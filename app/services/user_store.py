"""
Fail-soft user record store.

Sits behind the checkout and webhook paths, so storage errors are logged and
absorbed here instead of reaching the HTTP response.
"""
from __future__ import annotations

import logging
import threading
from typing import Optional

from fastapi import Request

from app.config import Settings, get_settings
from app.models.user import UserRecord
from app.services.storage_backends import UserBackend, select_backend

logger = logging.getLogger(__name__)


class UserStore:
    """Get-or-create and subscription updates over a lazily selected backend."""

    def __init__(self, settings: Optional[Settings] = None, backend: Optional[UserBackend] = None):
        self._settings = settings
        self._backend = backend
        self._lock = threading.Lock()

    @property
    def backend(self) -> UserBackend:
        """Select the backend on first access and reuse it afterwards."""
        if self._backend is None:
            with self._lock:
                if self._backend is None:
                    self._backend = select_backend(self._settings or get_settings())
        return self._backend

    @property
    def backend_name(self) -> Optional[str]:
        return self._backend.name if self._backend is not None else None

    def get_user(self, user_id: str) -> UserRecord:
        try:
            return self.backend.get_or_create(user_id)
        except Exception:
            logger.exception("Error loading user %s; serving default record", user_id)
            return UserRecord(id=user_id)

    def update_user_subscription(
        self,
        user_id: str,
        is_subscribed: bool,
        subscription_id: Optional[str] = None,
    ) -> None:
        try:
            self.backend.upsert(user_id, is_subscribed, subscription_id)
            logger.info(
                "User %s subscription updated: subscribed=%s subscription_id=%s",
                user_id,
                is_subscribed,
                subscription_id,
            )
        except Exception:
            logger.exception("Error updating subscription for user %s", user_id)


def get_user_store(request: Request) -> UserStore:
    """
    Dependency returning the process-wide store built at the composition root.
    """
    return request.app.state.user_store
