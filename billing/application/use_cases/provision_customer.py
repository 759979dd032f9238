from __future__ import annotations

import logging

from billing.application.dto.billing import ProvisionCustomerInput, ProvisionCustomerOutput
from billing.application.ports.stripe_port import StripePort
from billing.domain.exceptions import BillingInputError, ConfigError, ProviderError
from billing.shared.config import BillingConfig


logger = logging.getLogger(__name__)


class ProvisionCustomerUseCase:
    """Create a Stripe customer and attach the default subscription to it.

    Provider failures are returned on ``ProvisionCustomerOutput.error`` instead
    of being raised. A customer created before a failed subscription call is
    left in Stripe as-is.
    """

    def __init__(self, *, config: BillingConfig, stripe_port: StripePort):
        self._config = config
        self._stripe_port = stripe_port

    def execute(self, command: ProvisionCustomerInput) -> ProvisionCustomerOutput:
        if not command.customer_fields:
            raise BillingInputError("Customer fields are required.")
        if not self._config.default_price_id:
            raise ConfigError("STRIPE_DEFAULT_PRICE_ID is required.")

        try:
            customer = self._stripe_port.create_customer(fields=command.customer_fields)
        except ProviderError as exc:
            logger.warning("provision_customer: customer_create_failed error=%s", exc)
            return ProvisionCustomerOutput(error=exc)

        try:
            subscription = self._stripe_port.create_subscription(
                customer_id=customer["id"],
                price_id=self._config.default_price_id,
                trial_period_days=self._config.effective_trial_period_days,
            )
        except ProviderError as exc:
            logger.warning(
                "provision_customer: subscription_create_failed customer_id=%s error=%s",
                customer["id"],
                exc,
            )
            return ProvisionCustomerOutput(error=exc)

        logger.info(
            "provision_customer: provisioned customer_id=%s subscription_id=%s trial_days=%s",
            customer["id"],
            subscription.get("id"),
            self._config.effective_trial_period_days,
        )
        return ProvisionCustomerOutput(customer=customer, subscription=subscription)
