"""
Billing service: the integration surface host applications call.

This module provides the BillingService class for:
- Listing active products for pricing pages
- Creating subscription Checkout sessions
- Verifying webhooks and dispatching checkout fulfillment
- Creating Billing Portal sessions
- Checking Stripe connectivity

Related files:
    - config.py: ServiceConfig and bootstrap validation
    - adapters/stripe_adapter.py: Stripe calls and error translation
    - webhooks/dispatcher.py: Fulfillment dispatch
    - webhooks/views.py: HTTP edge for Stripe webhooks

Concurrency:
    All methods are coroutines. Blocking Stripe SDK calls run in a worker
    thread through asgiref's sync_to_async, so the event loop only waits on
    network I/O. The only shared state is the frozen ServiceConfig.

Usage:
    from billing.config import ServiceConfig
    from billing.services import BillingService

    service = BillingService(ServiceConfig(...))

    checkout = await service.create_checkout_session(
        user_id=str(user.pk),
        price_id="price_xxx",
        success_url="https://example.com/success",
        cancel_url="https://example.com/cancel",
    )

    event = await service.handle_webhook(request.body, signature, grant_access)
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from asgiref.sync import sync_to_async

from billing.adapters import StripeAdapter
from billing.config import ServiceConfig, validate_bootstrap
from billing.exceptions import ProviderRequestError
from billing.webhooks.dispatcher import FulfillmentDispatcher

if TYPE_CHECKING:
    from billing.types import (
        CheckoutSessionResult,
        FulfillmentHandler,
        PortalSessionResult,
        ProductSummary,
        VerifiedEvent,
    )

logger = logging.getLogger(__name__)


class BillingService:
    """
    Stripe subscription billing for one application.

    Construction validates the config before the Stripe adapter exists, so
    a service that failed validation never exposes any operation.

    Methods:
        fetch_active_products: Active products at their default price
        create_checkout_session: Subscription checkout carrying the user ID
        handle_webhook: Verify a webhook and dispatch fulfillment
        create_portal_session: Self-service billing management link
        verify_connection: Connectivity check that never raises
    """

    def __init__(self, config: ServiceConfig):
        self.config = validate_bootstrap(config)
        self._adapter = StripeAdapter(self.config)
        self._dispatcher = FulfillmentDispatcher()

    async def fetch_active_products(self) -> list[ProductSummary]:
        """
        List active, priced products.

        Reflects Stripe's state at call time; nothing is cached.

        Raises:
            ProviderRequestError: The Stripe call failed
        """
        return await sync_to_async(
            self._adapter.list_active_products, thread_sensitive=False
        )()

    async def create_checkout_session(
        self,
        user_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionResult:
        """
        Create a subscription Checkout Session for a user.

        The user ID is stored in the session metadata and in the resulting
        subscription's metadata; handle_webhook relies on it.

        Raises:
            ProviderRequestError: The Stripe call failed
        """
        return await sync_to_async(
            self._adapter.create_checkout_session, thread_sensitive=False
        )(
            user_id=str(user_id),
            price_id=price_id,
            success_url=success_url,
            cancel_url=cancel_url,
        )

    async def handle_webhook(
        self,
        raw_body: bytes | str,
        signature_header: str,
        fulfillment_handler: FulfillmentHandler,
    ) -> VerifiedEvent:
        """
        Verify a webhook delivery and run fulfillment when applicable.

        Args:
            raw_body: Exact request body as received
            signature_header: Stripe-Signature header value
            fulfillment_handler: Async callable taking (user_id, session)

        Returns:
            The verified event, whether or not fulfillment ran

        Raises:
            SignatureVerificationError: Verification failed; nothing was dispatched
            FulfillmentHandlerError: The handler raised
        """
        # Verification is local HMAC work, no network round trip
        event = self._adapter.construct_event(raw_body, signature_header)

        logger.info(
            f"Received Stripe webhook: {event.type}",
            extra={
                "stripe_event_id": event.id,
                "event_type": event.type,
                "app_name": self.config.app_name,
            },
        )

        return await self._dispatcher.dispatch(event, fulfillment_handler)

    async def create_portal_session(
        self,
        customer_id: str,
        return_url: str,
    ) -> PortalSessionResult:
        """
        Create a Billing Portal session for a customer.

        Raises:
            ProviderRequestError: The Stripe call failed
        """
        return await sync_to_async(
            self._adapter.create_billing_portal_session, thread_sensitive=False
        )(customer_id=customer_id, return_url=return_url)

    async def verify_connection(self) -> dict[str, Any]:
        """
        Check that the configured key can reach Stripe.

        Call this at startup or from an admin dashboard. Failures are
        reported as data; this method never raises.

        Returns:
            {"status": "connected", "api_version": ..., "app_version": ...}
            or {"status": "error", "message": ...}
        """
        try:
            await sync_to_async(self._adapter.retrieve_balance, thread_sensitive=False)()
        except ProviderRequestError as e:
            return {"status": "error", "message": e.message or e.error_code}
        except Exception as e:
            logger.error(
                f"Unexpected error verifying Stripe connection: {type(e).__name__}",
                extra={"app_name": self.config.app_name},
                exc_info=True,
            )
            return {"status": "error", "message": str(e) or type(e).__name__}

        return {
            "status": "connected",
            "api_version": self.config.required_api_version,
            "app_version": self.config.app_version,
        }


@lru_cache
def get_billing_service() -> BillingService:
    """
    Return the process-wide BillingService built from Django settings.

    Raises:
        ConfigurationError: Settings do not hold a valid configuration
    """
    return BillingService(ServiceConfig.from_settings())


def reset_billing_service() -> None:
    """Drop the cached service so the next call rebuilds it from settings."""
    get_billing_service.cache_clear()


def get_fulfillment_handler() -> FulfillmentHandler:
    """
    Import the fulfillment handler named by BILLING_FULFILLMENT_HANDLER.

    The setting holds a dotted path to an async callable, e.g.
    "subscriptions.fulfillment.grant_access".
    """
    from django.conf import settings
    from django.utils.module_loading import import_string

    return import_string(settings.BILLING_FULFILLMENT_HANDLER)
