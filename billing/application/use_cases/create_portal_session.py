from __future__ import annotations

from billing.application.dto.billing import CreatePortalSessionInput, CreatePortalSessionOutput
from billing.application.ports.stripe_port import StripePort
from billing.domain.exceptions import BillingInputError


class CreatePortalSessionUseCase:
    # Callers must check that customer_id belongs to the authenticated user.
    def __init__(self, *, stripe_port: StripePort):
        self._stripe_port = stripe_port

    def execute(self, command: CreatePortalSessionInput) -> CreatePortalSessionOutput:
        if not command.customer_id:
            raise BillingInputError("customer_id is required.")
        if not command.return_url:
            raise BillingInputError("return_url is required.")

        session = self._stripe_port.create_billing_portal_session(
            customer_id=command.customer_id,
            return_url=command.return_url,
        )
        return CreatePortalSessionOutput(url=session["url"])
