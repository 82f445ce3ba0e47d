"""
Stripe API adapter for subscription billing.

This module provides the StripeAdapter class which encapsulates all Stripe
API interactions for one ServiceConfig. All Stripe calls should go through
this adapter to ensure consistent error handling and observability.

Features:
- Per-config credentials: api_key and stripe_version are sent with every
  request, so adapters for different apps never share SDK globals
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Webhook signature verification via stripe.Webhook

The adapter is synchronous; BillingService runs it off the event loop.

Usage:
    from billing.adapters import StripeAdapter

    adapter = StripeAdapter(config)

    products = adapter.list_active_products()
    result = adapter.create_checkout_session(
        user_id="42",
        price_id="price_xxx",
        success_url="https://example.com/success",
        cancel_url="https://example.com/cancel",
    )
    event = adapter.construct_event(request.body, signature_header)
"""

from __future__ import annotations

import logging
import time
from decimal import Decimal
from typing import TYPE_CHECKING, Any

import stripe

from billing.exceptions import (
    ProviderAuthenticationError,
    ProviderCardError,
    ProviderInvalidRequestError,
    ProviderRateLimitError,
    ProviderUnavailableError,
    SignatureVerificationError,
)
from billing.types import (
    USER_ID_METADATA_KEY,
    CheckoutSessionResult,
    PortalSessionResult,
    ProductSummary,
    VerifiedEvent,
    get_field,
    to_plain_dict,
)

if TYPE_CHECKING:
    from billing.config import ServiceConfig


# Stripe amounts are integers in the currency's smallest unit
MINOR_UNITS_PER_MAJOR = Decimal(100)


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    Holds no state beyond the immutable ServiceConfig, so one instance can
    be shared by concurrent requests.

    Usage:
        adapter = StripeAdapter(config)
        session = adapter.create_checkout_session(user_id, price_id, ok_url, cancel_url)
        event = adapter.construct_event(payload, signature)
    """

    def __init__(self, config: ServiceConfig):
        self.config = config

    # =========================================================================
    # Configuration
    # =========================================================================

    def _request_options(self) -> dict[str, Any]:
        """Per-request credentials and version pin."""
        return {
            "api_key": self.config.api_key,
            "stripe_version": self.config.required_api_version,
        }

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    def _log_context(self, operation: str, **fields: Any) -> dict[str, Any]:
        return {
            "operation": operation,
            "app_name": self.config.app_name,
            "api_version": self.config.required_api_version,
            **fields,
        }

    # =========================================================================
    # Catalog
    # =========================================================================

    def list_active_products(self) -> list[ProductSummary]:
        """
        List active products priced at their default price.

        Products without a default price, or whose default price has no
        unit_amount (e.g. tiered pricing), are skipped.

        Returns:
            ProductSummary list in Stripe's order

        Raises:
            ProviderRequestError: The Stripe call failed
        """
        logger = self.get_logger()
        log_context = self._log_context("list_active_products")

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            products = stripe.Product.list(
                active=True,
                expand=["data.default_price"],
                **self._request_options(),
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

        summaries = []
        for product in products.data:
            summary = self._summarize_product(product)
            if summary is None:
                logger.debug(
                    "Skipping product without a usable default price",
                    extra={**log_context, "product_id": get_field(product, "id")},
                )
                continue
            summaries.append(summary)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "Stripe operation completed",
            extra={
                **log_context,
                "count": len(summaries),
                "skipped": len(products.data) - len(summaries),
                "duration_ms": duration_ms,
            },
        )
        return summaries

    def _summarize_product(self, product: Any) -> ProductSummary | None:
        price = get_field(product, "default_price")
        if price is None or isinstance(price, str):
            return None

        unit_amount = get_field(price, "unit_amount")
        if unit_amount is None:
            return None

        currency = get_field(price, "currency") or self.config.currency
        return ProductSummary(
            id=get_field(product, "id"),
            name=get_field(product, "name"),
            description=get_field(product, "description"),
            price=Decimal(unit_amount) / MINOR_UNITS_PER_MAJOR,
            price_id=get_field(price, "id"),
            currency=currency.lower(),
        )

    # =========================================================================
    # Checkout & Billing Portal
    # =========================================================================

    def create_checkout_session(
        self,
        user_id: str,
        price_id: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionResult:
        """
        Create a subscription-mode Checkout Session for a user.

        The user ID is written to both the session metadata and the
        subscription metadata. The webhook only sees the session, and the
        subscription outlives it, so both objects must carry the link back
        to the application user.

        Args:
            user_id: Application user ID
            price_id: Stripe Price ID (price_xxx), must be recurring
            success_url: Redirect target after payment
            cancel_url: Redirect target when the customer backs out

        Returns:
            CheckoutSessionResult with the hosted checkout URL

        Raises:
            ProviderRequestError: The Stripe call failed
        """
        logger = self.get_logger()
        log_context = self._log_context(
            "create_checkout_session",
            user_id=user_id,
            price_id=price_id,
        )

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        metadata = {USER_ID_METADATA_KEY: user_id}

        try:
            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                line_items=[{"price": price_id, "quantity": 1}],
                mode="subscription",
                success_url=success_url,
                cancel_url=cancel_url,
                currency=self.config.currency,
                metadata=metadata,
                subscription_data={"metadata": dict(metadata)},
                **self._request_options(),
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "checkout_session_id": session.id,
                    "duration_ms": duration_ms,
                },
            )

            return CheckoutSessionResult(
                id=session.id,
                url=session.url,
                metadata=to_plain_dict(session.metadata),
                raw_response=session,
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    def create_billing_portal_session(
        self,
        customer_id: str,
        return_url: str,
    ) -> PortalSessionResult:
        """
        Create a Billing Portal session for an existing customer.

        Args:
            customer_id: Stripe Customer ID (cus_xxx)
            return_url: Where the portal sends the customer back to

        Returns:
            PortalSessionResult with the hosted portal URL

        Raises:
            ProviderRequestError: The Stripe call failed
        """
        logger = self.get_logger()
        log_context = self._log_context(
            "create_billing_portal_session",
            customer_id=customer_id,
        )

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            portal_session = stripe.billing_portal.Session.create(
                customer=customer_id,
                return_url=return_url,
                **self._request_options(),
            )

            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                "Stripe operation completed",
                extra={
                    **log_context,
                    "portal_session_id": portal_session.id,
                    "duration_ms": duration_ms,
                },
            )

            return PortalSessionResult(
                id=portal_session.id,
                url=portal_session.url,
                raw_response=portal_session,
            )

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Connectivity
    # =========================================================================

    def retrieve_balance(self) -> Any:
        """
        Retrieve the account balance.

        Lightweight authenticated call used to check that the key works.

        Raises:
            ProviderRequestError: The Stripe call failed
        """
        logger = self.get_logger()
        log_context = self._log_context("retrieve_balance")

        start_time = time.time()
        logger.debug("Starting Stripe operation", extra=log_context)

        try:
            balance = stripe.Balance.retrieve(**self._request_options())

            duration_ms = (time.time() - start_time) * 1000
            logger.debug(
                "Stripe operation completed",
                extra={**log_context, "duration_ms": duration_ms},
            )
            return balance

        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self._handle_stripe_error(e, log_context, duration_ms)
            raise

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    def construct_event(
        self,
        payload: bytes | str,
        signature: str,
    ) -> VerifiedEvent:
        """
        Verify and parse a Stripe webhook event.

        Verification is Stripe's timestamped HMAC-SHA256 scheme over the raw
        payload, compared in constant time, with timestamps older than
        webhook_tolerance_seconds rejected. The payload must be the exact
        body received on the wire.

        Args:
            payload: Raw webhook payload
            signature: Stripe-Signature header value

        Returns:
            VerifiedEvent

        Raises:
            SignatureVerificationError: Missing or invalid signature, stale
                timestamp, or a body that is not valid JSON
        """
        logger = self.get_logger()

        if not signature:
            raise SignatureVerificationError(
                "Missing webhook signature",
                details={"reason": "missing_signature"},
            )

        try:
            event = stripe.Webhook.construct_event(
                payload,
                signature,
                self.config.webhook_signing_secret,
                tolerance=self.config.webhook_tolerance_seconds,
                api_key=self.config.api_key,
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(
                "Webhook signature verification failed",
                extra=self._log_context("construct_event", error=str(e)),
            )
            raise SignatureVerificationError(
                "Invalid webhook signature",
                details={"reason": "signature_mismatch", "error": str(e)},
            ) from e
        except ValueError as e:
            logger.warning(
                "Webhook payload is not valid JSON",
                extra=self._log_context("construct_event", error=str(e)),
            )
            raise SignatureVerificationError(
                "Invalid webhook payload",
                details={"reason": "invalid_payload"},
            ) from e

        return VerifiedEvent.from_stripe(event)

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: Exception,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Args:
            error: The Stripe exception
            log_context: Logging context dict
            duration_ms: Operation duration for logging

        Raises:
            ProviderCardError: Card was declined
            ProviderInvalidRequestError: Invalid request parameters
            ProviderAuthenticationError: Invalid or revoked API key
            ProviderRateLimitError: Rate limited
            ProviderUnavailableError: API unavailable or unexpected error
        """
        logger = cls.get_logger()

        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.CardError):
            logger.warning(
                "Card error from Stripe",
                extra={**log_context, "stripe_code": error.code},
            )
            raise ProviderCardError(
                str(error.user_message or error),
                provider_code=error.code,
            ) from error

        elif isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )
            raise ProviderInvalidRequestError(
                str(error.user_message or error),
                provider_code=error.code,
                details={"param": error.param} if error.param else None,
            ) from error

        elif isinstance(error, (stripe.AuthenticationError, stripe.PermissionError)):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise ProviderAuthenticationError(
                str(error.user_message or error) or "Stripe authentication failed",
                provider_code="authentication_error",
            ) from error

        elif isinstance(error, stripe.RateLimitError):
            logger.warning(
                "Rate limited by Stripe",
                extra=log_context,
            )
            raise ProviderRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                provider_code="rate_limit",
            ) from error

        elif isinstance(error, stripe.APIConnectionError):
            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise ProviderUnavailableError(
                "Could not connect to Stripe. Please retry.",
                provider_code="api_connection_error",
            ) from error

        elif isinstance(error, stripe.StripeError):
            logger.error(
                "Stripe API error",
                extra=log_context,
                exc_info=True,
            )
            raise ProviderUnavailableError(
                "Stripe service error. Please retry.",
                provider_code="api_error",
            ) from error

        else:
            logger.error(
                f"Unexpected error from Stripe: {type(error).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise ProviderUnavailableError(
                f"Unexpected Stripe error: {error}",
                provider_code="unknown_error",
            ) from error
