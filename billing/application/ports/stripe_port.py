from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class StripePort(Protocol):
    def create_customer(self, *, fields: Mapping[str, Any]) -> dict[str, Any]:
        ...

    def create_subscription(
        self,
        *,
        customer_id: str,
        price_id: str,
        trial_period_days: int | None,
    ) -> dict[str, Any]:
        ...

    def create_billing_portal_session(self, *, customer_id: str, return_url: str) -> dict[str, Any]:
        ...

    def create_checkout_session(
        self,
        *,
        client_reference_id: str,
        customer_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
    ) -> dict[str, Any]:
        ...

    def construct_event(self, *, payload: bytes, signature: str) -> dict[str, Any]:
        ...
