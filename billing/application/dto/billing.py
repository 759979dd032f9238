from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from billing.domain.exceptions import BillingError


CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


@dataclass(frozen=True)
class ProvisionCustomerInput:
    customer_fields: dict[str, Any]


@dataclass(frozen=True)
class ProvisionCustomerOutput:
    customer: dict[str, Any] | None = None
    subscription: dict[str, Any] | None = None
    error: BillingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CreatePortalSessionInput:
    customer_id: str
    return_url: str


@dataclass(frozen=True)
class CreatePortalSessionOutput:
    url: str


@dataclass(frozen=True)
class CreateCheckoutSessionInput:
    client_reference_id: str
    customer_id: str
    price_id: str
    success_url: str
    cancel_url: str


@dataclass(frozen=True)
class CreateCheckoutSessionOutput:
    checkout_session_id: str
    checkout_url: str | None


@dataclass(frozen=True)
class StripeWebhookInput:
    signature: str
    payload: bytes


@dataclass(frozen=True)
class StripeWebhookOutput:
    event_type: str
    event_id: str | None
    handled: bool
