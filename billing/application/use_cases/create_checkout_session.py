from __future__ import annotations

from billing.application.dto.billing import CreateCheckoutSessionInput, CreateCheckoutSessionOutput
from billing.application.ports.stripe_port import StripePort
from billing.domain.exceptions import BillingInputError


class CreateCheckoutSessionUseCase:
    def __init__(self, *, stripe_port: StripePort):
        self._stripe_port = stripe_port

    def execute(self, command: CreateCheckoutSessionInput) -> CreateCheckoutSessionOutput:
        if not command.price_id:
            raise BillingInputError("price_id is required.")
        if not command.customer_id:
            raise BillingInputError("customer_id is required.")

        session = self._stripe_port.create_checkout_session(
            client_reference_id=command.client_reference_id,
            customer_id=command.customer_id,
            price_id=command.price_id,
            success_url=command.success_url,
            cancel_url=command.cancel_url,
        )
        return CreateCheckoutSessionOutput(
            checkout_session_id=str(session["id"]),
            checkout_url=session.get("url"),
        )
