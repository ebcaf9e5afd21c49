"""Thin wrapper around Anthropic async client."""
from __future__ import annotations

from anthropic import AsyncAnthropic

from app.core.exceptions import IntegrationError


_clients: dict[tuple[str, float], AsyncAnthropic] = {}


def get_anthropic_client(api_key: str | None, timeout: float) -> AsyncAnthropic:
    if not api_key:
        raise IntegrationError("ANTHROPIC_API_KEY is not configured on the server.")
    key = (api_key, timeout)
    if key not in _clients:
        # Callers re-issue failed requests themselves.
        _clients[key] = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
    return _clients[key]
