from __future__ import annotations

import pytest

from billing.application.dto.billing import StripeWebhookInput
from billing.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from billing.domain.exceptions import BillingInputError, WebhookSignatureError
from billing.shared.config import BillingConfig


class FakeStripePort:
    def __init__(self, *, event: dict | None = None, valid: bool = True):
        self.event = event
        self.valid = valid
        self.calls: list[tuple[bytes, str]] = []

    def construct_event(self, *, payload: bytes, signature: str) -> dict:
        self.calls.append((payload, signature))
        if not self.valid:
            raise WebhookSignatureError("Invalid Stripe webhook signature.")
        return self.event


class RecordingFulfillment:
    def __init__(self, error: Exception | None = None):
        self.sessions: list[dict] = []
        self.error = error

    def __call__(self, session):
        self.sessions.append(session)
        if self.error is not None:
            raise self.error
        return {"fulfilled": session["id"]}


def _use_case(port: FakeStripePort, fulfillment: RecordingFulfillment) -> ProcessStripeWebhookUseCase:
    config = BillingConfig(
        default_price_id="price_free",
        use_trial=False,
        trial_period_days=None,
        fulfill_order=fulfillment,
        webhook_signing_secret="whsec_test",
    )
    return ProcessStripeWebhookUseCase(config=config, stripe_port=port)


def _command() -> StripeWebhookInput:
    return StripeWebhookInput(signature="t=1,v1=abc", payload=b"{}")


def test_invalid_signature_rejected_without_fulfillment():
    fulfillment = RecordingFulfillment()
    use_case = _use_case(FakeStripePort(valid=False), fulfillment)

    with pytest.raises(WebhookSignatureError):
        use_case.execute(_command())

    assert fulfillment.sessions == []


def test_other_event_types_are_acknowledged_without_fulfillment():
    event = {
        "id": "evt_1",
        "type": "customer.subscription.updated",
        "data": {"object": {"id": "sub_1"}},
    }
    fulfillment = RecordingFulfillment()
    use_case = _use_case(FakeStripePort(event=event), fulfillment)

    output = use_case.execute(_command())

    assert output.event_type == "customer.subscription.updated"
    assert output.event_id == "evt_1"
    assert output.handled is False
    assert fulfillment.sessions == []


def test_checkout_completed_invokes_fulfillment_once_with_session():
    session = {
        "id": "cs_test_1",
        "object": "checkout.session",
        "client_reference_id": "user-1",
        "metadata": {"sku": "book"},
    }
    event = {"id": "evt_2", "type": "checkout.session.completed", "data": {"object": session}}
    fulfillment = RecordingFulfillment()
    port = FakeStripePort(event=event)
    use_case = _use_case(port, fulfillment)

    output = use_case.execute(_command())

    assert output.handled is True
    assert output.event_id == "evt_2"
    assert len(fulfillment.sessions) == 1
    assert fulfillment.sessions[0] is session
    assert port.calls == [(b"{}", "t=1,v1=abc")]


def test_redelivery_invokes_fulfillment_again():
    event = {"id": "evt_3", "type": "checkout.session.completed", "data": {"object": {"id": "cs_3"}}}
    fulfillment = RecordingFulfillment()
    use_case = _use_case(FakeStripePort(event=event), fulfillment)

    use_case.execute(_command())
    use_case.execute(_command())

    assert [s["id"] for s in fulfillment.sessions] == ["cs_3", "cs_3"]


def test_fulfillment_errors_propagate():
    event = {"id": "evt_4", "type": "checkout.session.completed", "data": {"object": {"id": "cs_4"}}}
    fulfillment = RecordingFulfillment(error=RuntimeError("warehouse offline"))
    use_case = _use_case(FakeStripePort(event=event), fulfillment)

    with pytest.raises(RuntimeError, match="warehouse offline"):
        use_case.execute(_command())


def test_checkout_completed_without_session_object_is_rejected():
    event = {"id": "evt_5", "type": "checkout.session.completed", "data": {}}
    fulfillment = RecordingFulfillment()
    use_case = _use_case(FakeStripePort(event=event), fulfillment)

    with pytest.raises(BillingInputError):
        use_case.execute(_command())
    assert fulfillment.sessions == []
