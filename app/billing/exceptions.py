"""
Billing-specific exceptions for Stripe subscription operations.

Exception Hierarchy:
    BillingError (base for billing domain)
    ├── ConfigurationError - Malformed credentials at construction (fatal)
    ├── SignatureVerificationError - Webhook payload failed verification
    ├── FulfillmentHandlerError - Caller-supplied fulfillment handler failed
    └── ProviderRequestError - Any Stripe API call failed
        ├── ProviderInvalidRequestError - Invalid request params (permanent)
        ├── ProviderAuthenticationError - Invalid or revoked API key (permanent)
        ├── ProviderCardError - Card declined (permanent)
        ├── ProviderRateLimitError - Rate limited (transient, retry)
        └── ProviderUnavailableError - API unavailable (transient, retry)

Recovery policy:
    Only BillingService.verify_connection() catches ProviderRequestError and
    reports it as data. Everything else propagates to the caller unchanged.

Usage:
    from billing.exceptions import SignatureVerificationError

    try:
        event = await service.handle_webhook(body, signature, fulfill)
    except SignatureVerificationError:
        return HttpResponse("Invalid signature", status=400)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ExternalServiceError

if TYPE_CHECKING:
    from typing import Any


class BillingError(BaseApplicationError):
    """
    Base exception for all billing operations.

    All billing-specific exceptions inherit from this class, which itself
    inherits from BaseApplicationError for consistent API error responses.
    """

    default_error_code: str = "BILLING_ERROR"


class ConfigurationError(BillingError):
    """
    Raised when a ServiceConfig fails bootstrap validation.

    The service is unusable after this error; construction is aborted
    before any Stripe capability is exposed.

    Example:
        if not config.api_key.startswith(SECRET_KEY_PREFIX):
            raise ConfigurationError(
                "Invalid Stripe secret key provided",
                details={"field": "api_key"},
            )
    """

    default_error_code: str = "BILLING_CONFIGURATION_ERROR"


class SignatureVerificationError(BillingError):
    """
    Webhook payload failed cryptographic verification.

    Raised for a bad or missing Stripe-Signature header, a timestamp outside
    the tolerance window, a tampered body or a body that is not valid JSON.
    Not recoverable locally: the HTTP edge should answer 400.
    """

    default_error_code: str = "SIGNATURE_VERIFICATION_FAILED"


class FulfillmentHandlerError(BillingError):
    """
    The caller-supplied fulfillment handler raised.

    The original exception is chained as __cause__. The HTTP edge should
    answer with a 5xx so Stripe redelivers the event.
    """

    default_error_code: str = "FULFILLMENT_HANDLER_FAILED"


class ProviderRequestError(BillingError, ExternalServiceError):
    """
    Base exception for all failed Stripe API calls.

    Attributes:
        provider_code: Stripe's error code, when one was returned
        is_retryable: Whether the operation can be retried by the caller

    Nothing in this package retries; is_retryable is informational for
    the caller.
    """

    default_error_code: str = "PROVIDER_REQUEST_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        provider_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if provider_code:
            details["provider_code"] = provider_code
        super().__init__(message, error_code=error_code, details=details)
        self.provider_code = provider_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class ProviderInvalidRequestError(ProviderRequestError):
    """
    Invalid request parameters sent to Stripe.

    Possible causes:
    - Unknown price or customer ID
    - Price not recurring while creating a subscription checkout
    - Missing required parameters
    """

    default_error_code: str = "PROVIDER_INVALID_REQUEST"
    is_retryable: bool = False


class ProviderAuthenticationError(ProviderRequestError):
    """Stripe rejected the API key (invalid, revoked or wrong mode)."""

    default_error_code: str = "PROVIDER_AUTHENTICATION_FAILED"
    is_retryable: bool = False


class ProviderCardError(ProviderRequestError):
    """Card was declined by the issuing bank."""

    default_error_code: str = "PROVIDER_CARD_DECLINED"
    is_retryable: bool = False


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry with backoff)
# -----------------------------------------------------------------------------


class ProviderRateLimitError(ProviderRequestError):
    """Rate limited by the Stripe API."""

    default_error_code: str = "PROVIDER_RATE_LIMITED"
    is_retryable: bool = True


class ProviderUnavailableError(ProviderRequestError):
    """
    Stripe API is temporarily unavailable.

    This covers:
    - Network connectivity issues
    - Stripe server errors (5xx)
    - Unexpected errors raised by the SDK
    """

    default_error_code: str = "PROVIDER_UNAVAILABLE"
    is_retryable: bool = True


__all__ = [
    "BillingError",
    "ConfigurationError",
    "SignatureVerificationError",
    "FulfillmentHandlerError",
    # Provider
    "ProviderRequestError",
    "ProviderInvalidRequestError",
    "ProviderAuthenticationError",
    "ProviderCardError",
    "ProviderRateLimitError",
    "ProviderUnavailableError",
]
