from __future__ import annotations

import logging

from billing.application.dto.billing import (
    CHECKOUT_SESSION_COMPLETED,
    StripeWebhookInput,
    StripeWebhookOutput,
)
from billing.application.ports.stripe_port import StripePort
from billing.domain.exceptions import BillingInputError
from billing.shared.config import BillingConfig


logger = logging.getLogger(__name__)


class ProcessStripeWebhookUseCase:
    """Verify a Stripe webhook and fulfil completed checkouts.

    The fulfillment callback runs before the event is acknowledged and its
    exceptions propagate, so a failed fulfillment is redelivered by Stripe.
    Deliveries are at-least-once; the callback must tolerate repeats.
    """

    def __init__(self, *, config: BillingConfig, stripe_port: StripePort):
        self._config = config
        self._stripe_port = stripe_port

    def execute(self, command: StripeWebhookInput) -> StripeWebhookOutput:
        event = self._stripe_port.construct_event(payload=command.payload, signature=command.signature)

        event_type = str(event.get("type", ""))
        event_id = event.get("id")

        if event_type != CHECKOUT_SESSION_COMPLETED:
            logger.info("process_stripe_webhook: ignored event_type=%s event_id=%s", event_type, event_id)
            return StripeWebhookOutput(event_type=event_type, event_id=event_id, handled=False)

        session = (event.get("data") or {}).get("object")
        if not isinstance(session, dict):
            raise BillingInputError("Stripe checkout event missing session object.")

        logger.info(
            "process_stripe_webhook: fulfilling event_id=%s session_id=%s",
            event_id,
            session.get("id"),
        )
        self._config.fulfill_order(session)
        return StripeWebhookOutput(event_type=event_type, event_id=event_id, handled=True)
