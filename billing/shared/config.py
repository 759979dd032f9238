from __future__ import annotations

import importlib
import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv

from billing.domain.exceptions import ConfigError


load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TRIAL_PERIOD_DAYS = 14

FulfillOrder = Callable[[Mapping[str, Any]], Any]

_TRUTHY = {"1", "true", "yes", "on"}


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: bool = False) -> bool:
    value = _env(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def _optional_int(name: str) -> int | None:
    value = _env(name)
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer.") from exc
    if parsed <= 0:
        raise ConfigError(f"{name} must be a positive integer.")
    return parsed


def get_log_level() -> str:
    return _env("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class Settings:
    stripe_secret_key: str
    stripe_webhook_secret: str
    stripe_account: str | None
    project_id: str
    default_price_id: str
    use_trial: bool
    trial_period_days: int | None
    fulfill_order_path: str | None
    log_level: str


def get_settings() -> Settings:
    return Settings(
        stripe_secret_key=_env("STRIPE_SECRET_KEY", ""),
        stripe_webhook_secret=_env("STRIPE_WEBHOOK_SECRET", ""),
        stripe_account=_env("STRIPE_ACCOUNT") or None,
        project_id=_env("BILLING_PROJECT_ID", ""),
        default_price_id=_env("STRIPE_DEFAULT_PRICE_ID", ""),
        use_trial=_bool("STRIPE_USE_TRIAL"),
        trial_period_days=_optional_int("STRIPE_TRIAL_PERIOD_DAYS"),
        fulfill_order_path=_env("BILLING_FULFILL_ORDER") or None,
        log_level=get_log_level(),
    )


def log_fulfilled_order(session: Mapping[str, Any]) -> None:
    logger.info(
        "fulfillment: default_callback session_id=%s client_reference_id=%s",
        session.get("id"),
        session.get("client_reference_id"),
    )


def load_fulfill_order(path: str | None) -> FulfillOrder:
    """Resolve a ``"package.module:function"`` path to the fulfillment callback.

    Without a path the default callback only logs the completed session, so
    deployments that sell anything must point ``BILLING_FULFILL_ORDER`` at
    their own function.
    """
    if not path:
        return log_fulfilled_order

    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError("BILLING_FULFILL_ORDER must look like 'package.module:function'.")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Cannot import fulfillment module '{module_name}'.") from exc

    callback = getattr(module, attr, None)
    if not callable(callback):
        raise ConfigError(f"Fulfillment callback '{path}' is not callable.")
    return callback


@dataclass(frozen=True)
class BillingConfig:
    default_price_id: str
    use_trial: bool
    trial_period_days: int | None
    fulfill_order: FulfillOrder
    webhook_signing_secret: str
    stripe_account: str | None = None
    project_id: str = ""

    @property
    def effective_trial_period_days(self) -> int | None:
        if not self.use_trial:
            return None
        if self.trial_period_days is None:
            return DEFAULT_TRIAL_PERIOD_DAYS
        return self.trial_period_days


def build_billing_config(settings: Settings) -> BillingConfig:
    return BillingConfig(
        default_price_id=settings.default_price_id,
        use_trial=settings.use_trial,
        trial_period_days=settings.trial_period_days,
        fulfill_order=load_fulfill_order(settings.fulfill_order_path),
        webhook_signing_secret=settings.stripe_webhook_secret,
        stripe_account=settings.stripe_account,
        project_id=settings.project_id,
    )
