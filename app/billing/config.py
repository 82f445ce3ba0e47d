"""
Service configuration and bootstrap validation.

A ServiceConfig is the immutable bundle of credentials and version pins a
BillingService is built from. Each application sharing this package builds
its own config, so several apps (different names, versions, currencies or
Stripe accounts) can run side by side in one process.

Usage:
    from billing.config import ServiceConfig

    config = ServiceConfig(
        api_key="sk_test_...",
        webhook_signing_secret="whsec_...",
        app_version="1.4.0",
        required_api_version="2025-01-27.acacia",
    )

    # Or from Django settings
    config = ServiceConfig.from_settings()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from billing.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

SECRET_KEY_PREFIX = "sk_"

# Stripe's own default for webhook timestamp tolerance
DEFAULT_WEBHOOK_TOLERANCE_SECONDS = 300


@dataclass(frozen=True)
class ServiceConfig:
    """
    Credentials and version pins for one billing integration.

    Attributes:
        api_key: Stripe secret key (sk_test_... / sk_live_...)
        webhook_signing_secret: Signing secret of the webhook endpoint (whsec_...)
        app_version: Version of the host application, reported in diagnostics
        required_api_version: Stripe API version pinned on every request
        app_name: Name of the host application, used in log context
        currency: Lowercase ISO 4217 code used for checkout and as catalog fallback
        webhook_tolerance_seconds: Maximum age of a signed webhook timestamp
    """

    api_key: str = field(repr=False)
    webhook_signing_secret: str = field(repr=False)
    app_version: str
    required_api_version: str
    app_name: str = "default"
    currency: str = "usd"
    webhook_tolerance_seconds: int = DEFAULT_WEBHOOK_TOLERANCE_SECONDS

    @classmethod
    def from_settings(cls) -> ServiceConfig:
        """
        Build a config from Django settings.

        Reads STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET, STRIPE_API_VERSION,
        STRIPE_WEBHOOK_TOLERANCE_SECONDS, BILLING_APP_NAME, BILLING_APP_VERSION
        and BILLING_CURRENCY.
        """
        from django.conf import settings

        return cls(
            api_key=settings.STRIPE_SECRET_KEY,
            webhook_signing_secret=settings.STRIPE_WEBHOOK_SECRET,
            app_version=settings.BILLING_APP_VERSION,
            required_api_version=settings.STRIPE_API_VERSION,
            app_name=getattr(settings, "BILLING_APP_NAME", "default"),
            currency=getattr(settings, "BILLING_CURRENCY", "usd"),
            webhook_tolerance_seconds=getattr(
                settings,
                "STRIPE_WEBHOOK_TOLERANCE_SECONDS",
                DEFAULT_WEBHOOK_TOLERANCE_SECONDS,
            ),
        )


def validate_bootstrap(config: ServiceConfig) -> ServiceConfig:
    """
    Validate a config before any network capability is exposed.

    Emits one diagnostic log line per successfully validated config.

    Args:
        config: The config to validate

    Returns:
        The same config, unchanged

    Raises:
        ConfigurationError: Secret key has the wrong shape, or a required
            field is empty
    """
    api_key = config.api_key or ""
    if not api_key.startswith(SECRET_KEY_PREFIX) or len(api_key) == len(
        SECRET_KEY_PREFIX
    ):
        raise ConfigurationError(
            "Invalid Stripe secret key provided",
            details={"field": "api_key", "expected_prefix": SECRET_KEY_PREFIX},
        )

    for field_name in ("webhook_signing_secret", "app_version", "required_api_version"):
        if not getattr(config, field_name):
            raise ConfigurationError(
                f"{field_name} is required",
                details={"field": field_name},
            )

    if not config.currency:
        raise ConfigurationError("currency is required", details={"field": "currency"})

    if config.webhook_tolerance_seconds <= 0:
        raise ConfigurationError(
            "webhook_tolerance_seconds must be positive",
            details={"field": "webhook_tolerance_seconds"},
        )

    logger.info(
        f"[BillingService] {config.app_name} v{config.app_version} initialized.",
        extra={
            "app_name": config.app_name,
            "app_version": config.app_version,
            "api_version": config.required_api_version,
            "livemode": api_key.startswith("sk_live_"),
        },
    )
    return config
