from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException

from billing.application.ports.stripe_port import StripePort
from billing.application.use_cases.create_checkout_session import CreateCheckoutSessionUseCase
from billing.application.use_cases.create_portal_session import CreatePortalSessionUseCase
from billing.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from billing.application.use_cases.provision_customer import ProvisionCustomerUseCase
from billing.domain.exceptions import ConfigError
from billing.infrastructure.clients.stripe_client import StripeClient
from billing.shared.config import BillingConfig, Settings, build_billing_config, get_settings


def get_app_settings() -> Settings:
    try:
        return get_settings()
    except ConfigError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@lru_cache(maxsize=1)
def get_billing_config() -> BillingConfig:
    try:
        return build_billing_config(get_settings())
    except ConfigError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@lru_cache(maxsize=4)
def _get_stripe_client(secret_key: str, webhook_secret: str, stripe_account: str | None) -> StripeClient:
    return StripeClient(
        secret_key=secret_key,
        webhook_secret=webhook_secret,
        stripe_account=stripe_account,
    )


def get_stripe_port(
    settings: Settings = Depends(get_app_settings),
    config: BillingConfig = Depends(get_billing_config),
) -> StripePort:
    if not settings.stripe_secret_key:
        raise HTTPException(status_code=500, detail="STRIPE_SECRET_KEY is required.")
    return _get_stripe_client(
        settings.stripe_secret_key,
        config.webhook_signing_secret,
        config.stripe_account,
    )


def get_provision_customer_use_case(
    config: BillingConfig = Depends(get_billing_config),
    stripe_port: StripePort = Depends(get_stripe_port),
) -> ProvisionCustomerUseCase:
    if not config.default_price_id:
        raise HTTPException(status_code=500, detail="STRIPE_DEFAULT_PRICE_ID is required.")
    return ProvisionCustomerUseCase(config=config, stripe_port=stripe_port)


def get_create_portal_session_use_case(
    stripe_port: StripePort = Depends(get_stripe_port),
) -> CreatePortalSessionUseCase:
    return CreatePortalSessionUseCase(stripe_port=stripe_port)


def get_create_checkout_session_use_case(
    stripe_port: StripePort = Depends(get_stripe_port),
) -> CreateCheckoutSessionUseCase:
    return CreateCheckoutSessionUseCase(stripe_port=stripe_port)


def get_process_stripe_webhook_use_case(
    config: BillingConfig = Depends(get_billing_config),
    stripe_port: StripePort = Depends(get_stripe_port),
) -> ProcessStripeWebhookUseCase:
    if not config.webhook_signing_secret:
        raise HTTPException(status_code=500, detail="STRIPE_WEBHOOK_SECRET is required.")
    return ProcessStripeWebhookUseCase(config=config, stripe_port=stripe_port)
