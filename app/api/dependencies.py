"""Shared API dependencies."""
from __future__ import annotations

from fastapi import Depends

from app.config import Settings, get_settings
from app.core.security import get_current_user
from app.integrations.lemonsqueezy import LemonSqueezyClient
from app.services.humanizer import HumanizerService
from app.services.user_store import get_user_store


def get_humanizer_service(settings: Settings = Depends(get_settings)) -> HumanizerService:
    return HumanizerService(settings)


def get_checkout_client(settings: Settings = Depends(get_settings)) -> LemonSqueezyClient:
    return LemonSqueezyClient(settings)


__all__ = [
    "get_checkout_client",
    "get_current_user",
    "get_humanizer_service",
    "get_settings",
    "get_user_store",
]
