"""
URL configuration for the billing app.

Routes:
    - GET /products/ - Active products
    - POST /checkout/ - Create checkout session
    - POST /billing-portal/ - Create billing portal session
    - GET /connection/ - Stripe connectivity (admin)
    - POST /webhooks/stripe/ - Stripe webhook endpoint

All routes are prefixed with /api/v1/billing/ when included in the main URLconf.

Usage:
    # In config/urls.py
    api_v1_patterns = [
        path("billing/", include("billing.urls")),
    ]
"""

from django.urls import path

from billing.views import (
    ConnectionStatusView,
    CreateBillingPortalView,
    CreateCheckoutSessionView,
    ProductListView,
)
from billing.webhooks.views import stripe_webhook

app_name = "billing"

urlpatterns = [
    path("products/", ProductListView.as_view(), name="products"),
    path("checkout/", CreateCheckoutSessionView.as_view(), name="checkout"),
    path(
        "billing-portal/",
        CreateBillingPortalView.as_view(),
        name="billing_portal",
    ),
    path("connection/", ConnectionStatusView.as_view(), name="connection"),
    # Webhook endpoints
    path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
]
