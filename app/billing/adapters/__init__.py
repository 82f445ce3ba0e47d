"""
Billing adapters for external services.

All Stripe API calls go through StripeAdapter to ensure consistent error
handling, per-app credentials and observability.

Usage:
    from billing.adapters import StripeAdapter

    adapter = StripeAdapter(config)
    products = adapter.list_active_products()
"""

from billing.adapters.stripe_adapter import StripeAdapter

__all__ = [
    "StripeAdapter",
]
