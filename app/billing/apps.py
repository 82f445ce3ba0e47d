"""
Billing app configuration.

This app bridges host applications to Stripe subscriptions:
- Product catalog for pricing pages
- Checkout and billing portal sessions
- Webhook verification and fulfillment dispatch
"""

from django.apps import AppConfig


class BillingConfig(AppConfig):
    """Configuration for the billing application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "billing"
    verbose_name = "Billing"
