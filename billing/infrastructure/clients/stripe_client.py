from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import stripe

from billing.application.ports.stripe_port import StripePort
from billing.domain.exceptions import ProviderError, WebhookSignatureError


logger = logging.getLogger(__name__)


class StripeClient(StripePort):
    def __init__(
        self,
        *,
        secret_key: str,
        webhook_secret: str,
        stripe_account: str | None = None,
        webhook_tolerance_seconds: int = stripe.Webhook.DEFAULT_TOLERANCE,
    ):
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._stripe_account = stripe_account
        self._webhook_tolerance_seconds = webhook_tolerance_seconds

    def create_customer(self, *, fields: Mapping[str, Any]) -> dict[str, Any]:
        customer = self._call("create_customer", stripe.Customer.create, **dict(fields))
        _require_id(customer, "customer")
        return customer

    def create_subscription(
        self,
        *,
        customer_id: str,
        price_id: str,
        trial_period_days: int | None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "customer": customer_id,
            "items": [{"price": price_id}],
        }
        if trial_period_days is not None:
            payload["trial_period_days"] = trial_period_days

        subscription = self._call("create_subscription", stripe.Subscription.create, **payload)
        _require_id(subscription, "subscription")
        return subscription

    def create_billing_portal_session(self, *, customer_id: str, return_url: str) -> dict[str, Any]:
        session = self._call(
            "create_billing_portal_session",
            stripe.billing_portal.Session.create,
            customer=customer_id,
            return_url=return_url,
        )
        if not session.get("url"):
            raise ProviderError("Stripe billing portal session response is missing url.")
        return session

    def create_checkout_session(
        self,
        *,
        client_reference_id: str,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
    ) -> dict[str, Any]:
        session = self._call(
            "create_checkout_session",
            stripe.checkout.Session.create,
            mode="payment",
            line_items=[{"price": price_id, "quantity": 1}],
            client_reference_id=client_reference_id,
            customer=customer_id,
            success_url=success_url,
            cancel_url=cancel_url,
        )
        _require_id(session, "checkout session")
        return session

    def construct_event(self, *, payload: bytes, signature: str) -> dict[str, Any]:
        if not signature:
            raise WebhookSignatureError("Missing Stripe-Signature header.")
        if not self._webhook_secret:
            raise WebhookSignatureError("Webhook signing secret is not configured.")

        try:
            body = payload.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise WebhookSignatureError("Webhook payload is not valid UTF-8.") from exc

        try:
            stripe.WebhookSignature.verify_header(
                body,
                signature,
                self._webhook_secret,
                self._webhook_tolerance_seconds,
            )
        except stripe.SignatureVerificationError as exc:
            logger.warning("stripe_client: webhook_signature_rejected reason=%s", exc)
            raise WebhookSignatureError("Invalid Stripe webhook signature.") from exc

        try:
            event = json.loads(body)
        except ValueError as exc:
            raise WebhookSignatureError("Invalid Stripe webhook payload.") from exc
        if not isinstance(event, dict):
            raise WebhookSignatureError("Invalid Stripe webhook payload.")
        return event

    def _call(self, operation: str, method, **params: Any) -> dict[str, Any]:
        options: dict[str, Any] = {"api_key": self._secret_key}
        if self._stripe_account:
            options["stripe_account"] = self._stripe_account

        try:
            result = method(**params, **options)
        except stripe.StripeError as exc:
            logger.warning(
                "stripe_client: request_failed operation=%s code=%s message=%s",
                operation,
                exc.code,
                exc.user_message or str(exc),
            )
            raise ProviderError(
                f"Stripe {operation} failed: {exc.user_message or exc}",
                provider_code=exc.code,
            ) from exc

        logger.info("stripe_client: request_ok operation=%s id=%s", operation, _get(result, "id"))
        return _to_dict(result)


def _to_dict(obj: Any) -> dict[str, Any]:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _require_id(obj: Mapping[str, Any], label: str) -> None:
    if not obj.get("id"):
        raise ProviderError(f"Stripe {label} id is missing.")
