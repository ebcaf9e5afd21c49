"""Custom exception types for domain and API layers."""


class AppError(Exception):
    """Base app exception."""


class ValidationError(AppError):
    """Validation failure for user input."""


class IntegrationError(AppError):
    """External integration call failure (LLM or payment provider)."""


class StorageError(AppError):
    """User record storage failure."""


class WebhookPayloadError(ValidationError):
    """Webhook payload lacks data required to apply it."""
