from __future__ import annotations


class DomainError(Exception):
    """Base for billing domain errors."""


class ConfigError(DomainError):
    """Billing configuration is missing or invalid."""


class BillingError(DomainError):
    """Base for errors raised while talking to the payments provider."""


class BillingInputError(BillingError):
    """Invalid parameters for a billing request."""


class ProviderError(BillingError):
    """A call to the payments provider failed."""

    def __init__(self, message: str, *, provider_code: str | None = None):
        super().__init__(message)
        self.provider_code = provider_code


class WebhookSignatureError(BillingError):
    """Webhook payload could not be authenticated."""
