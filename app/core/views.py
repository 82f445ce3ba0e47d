"""
Core views providing infrastructure endpoints.

This module contains views that are not part of the business domain but are
essential for application infrastructure, such as health checks.
"""

from django.conf import settings
from django.http import JsonResponse


def health_check(request):
    """
    Liveness endpoint for monitoring and orchestration.

    This endpoint is used by:
    - Docker health checks
    - Kubernetes liveness probes
    - Load balancers

    It deliberately does not call Stripe; use the admin-only
    /api/v1/billing/connection/ endpoint for that.

    Example Response:
        {
            "status": "healthy",
            "app_name": "default",
            "app_version": "0.1.0",
            "billing_configured": true
        }
    """
    return JsonResponse(
        {
            "status": "healthy",
            "app_name": settings.BILLING_APP_NAME,
            "app_version": settings.BILLING_APP_VERSION,
            "billing_configured": bool(
                settings.STRIPE_SECRET_KEY and settings.STRIPE_WEBHOOK_SECRET
            ),
        }
    )
