"""
Webhook handling for billing events from Stripe.

Webhooks are verified by StripeAdapter and handed to FulfillmentDispatcher,
which invokes the host application's fulfillment handler for completed
checkout sessions.

Usage:
    # In urls.py
    from billing.webhooks.views import stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
    ]
"""

from billing.webhooks.dispatcher import FulfillmentDispatcher

__all__ = [
    "FulfillmentDispatcher",
]
