"""External integration adapters."""

from .lemonsqueezy import LemonSqueezyClient, mock_checkout_url

__all__ = [
    "LemonSqueezyClient",
    "mock_checkout_url",
]
