"""
URL configuration for the billing service.

URL Structure:
    /health/                       - Health check endpoint (for load balancers, Docker)
    /api/v1/billing/               - Billing endpoints
        products/                  - Active products (GET)
        checkout/                  - Create checkout session (POST)
        billing-portal/            - Create billing portal session (POST)
        connection/                - Stripe connectivity, admin only (GET)
        webhooks/stripe/           - Stripe webhook endpoint (POST)

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.urls import include, path

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
api_v1_patterns = [
    # Billing
    path("billing/", include("billing.urls")),
]

urlpatterns = [
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]
