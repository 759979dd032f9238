from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class ProvisionCustomerRequest(BaseModel):
    customer: dict[str, Any] = Field(..., description="Fields forwarded to Stripe Customer.create.")

    @field_validator("customer")
    @classmethod
    def _require_contact(cls, value: dict[str, Any]) -> dict[str, Any]:
        if not value.get("email") and not value.get("phone"):
            raise ValueError("customer must include an email or phone.")
        return value


class ProvisionCustomerResponse(BaseModel):
    customer: dict[str, Any]
    subscription: dict[str, Any]


class BillingErrorDetail(BaseModel):
    message: str
    type: str
    provider_code: str | None = None


class BillingErrorResponse(BaseModel):
    error: BillingErrorDetail


class CreatePortalSessionRequest(BaseModel):
    customer_id: str = Field(..., min_length=1)
    return_url: str = Field(..., min_length=1)


class CreatePortalSessionResponse(BaseModel):
    url: str


class CreateCheckoutSessionRequest(BaseModel):
    client_reference_id: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    price_id: str = Field(..., min_length=1)
    success_url: str = Field(..., min_length=1)
    cancel_url: str = Field(..., min_length=1)


class CreateCheckoutSessionResponse(BaseModel):
    id: str
    url: str | None = None


class StripeWebhookResponse(BaseModel):
    event_type: str
    event_id: str | None = None
    handled: bool


class BillingHealthResponse(BaseModel):
    status: str
    module: str
    project_id: str
    stripe_configured: bool
    webhook_secret_configured: bool
    stripe_account_configured: bool
