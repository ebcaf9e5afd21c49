from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.config import Settings
from app.core.exceptions import IntegrationError

logger = logging.getLogger(__name__)

MOCK_CHECKOUT_BASE = "https://demo.lemonsqueezy.com/checkout/buy"
MISSING_RESOURCE_DETAIL = "The related resource does not exist."


def mock_checkout_url(variant_id: str, user_id: str) -> str:
    return (
        f"{MOCK_CHECKOUT_BASE}/{quote(variant_id, safe='')}"
        f"?checkout[custom][user_id]={quote(user_id, safe='')}"
    )


class LemonSqueezyClient:
    """Checkout creation against the Lemon Squeezy JSON:API."""

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None):
        self.api_key = (
            settings.lemon_squeezy_api_key.get_secret_value()
            if settings.lemon_squeezy_api_key
            else None
        )
        self.store_id = settings.lemon_squeezy_store_id
        self.timeout = settings.http_timeout_seconds
        self.base_url = "https://api.lemonsqueezy.com/v1"
        self.enabled = settings.payments_configured
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.api+json",
            "Content-Type": "application/vnd.api+json",
            "Authorization": f"Bearer {self.api_key}",
        }

    @staticmethod
    def _checkout_payload(variant_id: str, store_id: str, user_id: str) -> dict[str, Any]:
        return {
            "data": {
                "type": "checkouts",
                "attributes": {"checkout_data": {"custom": {"user_id": user_id}}},
                "relationships": {
                    "store": {"data": {"type": "stores", "id": store_id}},
                    "variant": {"data": {"type": "variants", "id": variant_id}},
                },
            }
        }

    async def create_checkout(self, variant_id: str, user_id: str) -> str:
        """Return a hosted checkout URL tagged with ``user_id``."""
        if not self.enabled:
            logger.warning(
                "No Lemon Squeezy API key or store id configured. Using mock checkout URL."
            )
            return mock_checkout_url(variant_id, user_id)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/checkouts",
                    headers=self._headers(),
                    json=self._checkout_payload(variant_id, str(self.store_id), user_id),
                )
        except httpx.HTTPError as exc:
            logger.error("Lemon Squeezy checkout request failed: %s", exc)
            raise IntegrationError(f"Checkout request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            logger.error("Lemon Squeezy returned non-JSON (%s): %s", response.status_code, response.text)
            raise IntegrationError(
                f"Unexpected checkout response (HTTP {response.status_code})"
            ) from exc

        errors = body.get("errors") if isinstance(body, dict) else None
        if errors:
            detail = str(errors[0].get("detail") or errors[0].get("title") or "Checkout failed")
            if detail == MISSING_RESOURCE_DETAIL:
                detail = (
                    "Invalid Store ID or Variant ID. Please check your Lemon Squeezy configuration."
                )
            raise IntegrationError(detail)
        if response.status_code >= 400:
            raise IntegrationError(f"Checkout failed (HTTP {response.status_code})")

        try:
            return str(body["data"]["attributes"]["url"])
        except (KeyError, TypeError) as exc:
            raise IntegrationError("Checkout response did not include a URL") from exc
