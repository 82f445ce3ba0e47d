"""
Webhook endpoint view for Stripe.

The view:
1. Rejects requests without a Stripe-Signature header
2. Verifies the signature over the raw body
3. Dispatches checkout fulfillment to the configured handler
4. Acknowledges the event

Fulfillment runs inside the request. A failing handler answers 500 so that
Stripe redelivers the event later; the handler must therefore be idempotent.

Usage:
    # In urls.py
    from billing.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""

from __future__ import annotations

import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from billing.exceptions import (
    ConfigurationError,
    FulfillmentHandlerError,
    SignatureVerificationError,
)
from billing.services import get_billing_service, get_fulfillment_handler


logger = logging.getLogger(__name__)


@csrf_exempt
@require_POST
async def stripe_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive, verify and fulfill Stripe webhook events.

    Security:
    - Signature verification prevents spoofed webhooks
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Returns:
        HttpResponse with status:
        - 200: Event verified (fulfilled, ignored, or skipped without userId)
        - 400: Missing or invalid signature
        - 500: Billing misconfigured, or the fulfillment handler failed

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    payload = request.body
    signature = request.headers.get("Stripe-Signature", "")

    if not signature:
        logger.warning("Webhook received without Stripe-Signature header")
        return HttpResponse("Missing signature", status=400)

    try:
        service = get_billing_service()
        handler = get_fulfillment_handler()
    except ConfigurationError as e:
        logger.critical(
            "Billing service is not configured",
            extra={"error_code": e.error_code, "details": e.details},
        )
        return HttpResponse("Billing not configured", status=500)

    try:
        event = await service.handle_webhook(payload, signature, handler)
    except SignatureVerificationError as e:
        logger.warning(
            "Webhook signature verification failed",
            extra={"error": str(e)},
        )
        return HttpResponse("Invalid signature", status=400)
    except FulfillmentHandlerError as e:
        logger.error(
            "Webhook fulfillment failed, Stripe will redeliver",
            extra={"error": str(e), "details": e.details},
        )
        return HttpResponse("Fulfillment failed", status=500)

    return JsonResponse({"received": True, "event_type": event.type})
