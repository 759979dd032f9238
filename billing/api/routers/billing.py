from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from billing.api.deps import (
    get_app_settings,
    get_billing_config,
    get_create_checkout_session_use_case,
    get_create_portal_session_use_case,
    get_process_stripe_webhook_use_case,
    get_provision_customer_use_case,
)
from billing.api.schemas.billing import (
    BillingErrorDetail,
    BillingErrorResponse,
    BillingHealthResponse,
    CreateCheckoutSessionRequest,
    CreateCheckoutSessionResponse,
    CreatePortalSessionRequest,
    CreatePortalSessionResponse,
    ProvisionCustomerRequest,
    ProvisionCustomerResponse,
    StripeWebhookResponse,
)
from billing.application.dto.billing import (
    CreateCheckoutSessionInput,
    CreatePortalSessionInput,
    ProvisionCustomerInput,
    StripeWebhookInput,
)
from billing.application.use_cases.create_checkout_session import CreateCheckoutSessionUseCase
from billing.application.use_cases.create_portal_session import CreatePortalSessionUseCase
from billing.application.use_cases.process_stripe_webhook import ProcessStripeWebhookUseCase
from billing.application.use_cases.provision_customer import ProvisionCustomerUseCase
from billing.domain.exceptions import BillingError, ConfigError, ProviderError
from billing.shared.config import BillingConfig, Settings


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/billing", tags=["billing"])


def _error_response(exc: BillingError, *, status_code: int) -> JSONResponse:
    body = BillingErrorResponse(
        error=BillingErrorDetail(
            message=str(exc),
            type=type(exc).__name__,
            provider_code=getattr(exc, "provider_code", None),
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.post(
    "/customers",
    response_model=ProvisionCustomerResponse,
    responses={502: {"model": BillingErrorResponse}},
)
def provision_customer(
    req: ProvisionCustomerRequest,
    use_case: ProvisionCustomerUseCase = Depends(get_provision_customer_use_case),
):
    try:
        output = use_case.execute(ProvisionCustomerInput(customer_fields=req.customer))
    except ConfigError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except BillingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    if not output.ok:
        return _error_response(output.error, status_code=502)

    return ProvisionCustomerResponse(customer=output.customer, subscription=output.subscription)


@router.post(
    "/portal-session",
    response_model=CreatePortalSessionResponse,
    responses={502: {"model": BillingErrorResponse}},
)
def create_portal_session(
    req: CreatePortalSessionRequest,
    use_case: CreatePortalSessionUseCase = Depends(get_create_portal_session_use_case),
):
    try:
        output = use_case.execute(
            CreatePortalSessionInput(customer_id=req.customer_id, return_url=req.return_url)
        )
    except ProviderError as exc:
        return _error_response(exc, status_code=502)
    except BillingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return CreatePortalSessionResponse(url=output.url)


@router.post(
    "/checkout-session",
    response_model=CreateCheckoutSessionResponse,
    responses={502: {"model": BillingErrorResponse}},
)
def create_checkout_session(
    req: CreateCheckoutSessionRequest,
    use_case: CreateCheckoutSessionUseCase = Depends(get_create_checkout_session_use_case),
):
    try:
        output = use_case.execute(
            CreateCheckoutSessionInput(
                client_reference_id=req.client_reference_id,
                customer_id=req.customer_id,
                price_id=req.price_id,
                success_url=req.success_url,
                cancel_url=req.cancel_url,
            )
        )
    except ProviderError as exc:
        return _error_response(exc, status_code=502)
    except BillingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return CreateCheckoutSessionResponse(id=output.checkout_session_id, url=output.checkout_url)


@router.post("/webhook", response_model=StripeWebhookResponse)
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header("", alias="Stripe-Signature"),
    use_case: ProcessStripeWebhookUseCase = Depends(get_process_stripe_webhook_use_case),
):
    payload = await request.body()
    try:
        output = await run_in_threadpool(
            use_case.execute,
            StripeWebhookInput(
                signature=stripe_signature,
                payload=payload,
            ),
        )
    except BillingError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        # Non-2xx makes Stripe redeliver the event.
        logger.exception("billing_router: fulfillment_failed")
        raise HTTPException(status_code=500, detail="Order fulfillment failed.") from exc

    return StripeWebhookResponse(
        event_type=output.event_type,
        event_id=output.event_id,
        handled=output.handled,
    )


@router.get("/health", response_model=BillingHealthResponse)
def billing_health(
    settings: Settings = Depends(get_app_settings),
    config: BillingConfig = Depends(get_billing_config),
):
    return BillingHealthResponse(
        status="ok",
        module="billing",
        project_id=config.project_id,
        stripe_configured=bool(settings.stripe_secret_key),
        webhook_secret_configured=bool(config.webhook_signing_secret),
        stripe_account_configured=bool(config.stripe_account),
    )
