"""
DRF views for the billing app.

Endpoints:
    GET /api/v1/billing/products/ - Active products for pricing pages
    POST /api/v1/billing/checkout/ - Create checkout session
    POST /api/v1/billing/billing-portal/ - Create billing portal session
    GET /api/v1/billing/connection/ - Stripe connectivity (admin only)

Security:
    - Checkout and billing portal require authentication
    - The authenticated user's pk is the userId carried through checkout
    - The billing portal uses request.user.stripe_customer_id; the host
      application's user model is expected to provide it

Related files:
    - services.py: BillingService
    - serializers.py: Request/response serializers
    - webhooks/views.py: Stripe webhook endpoint
"""

from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from billing.exceptions import BillingError, ProviderRequestError
from billing.services import get_billing_service

from .serializers import (
    CreateBillingPortalSerializer,
    CreateCheckoutSessionSerializer,
    ProductSerializer,
)

logger = logging.getLogger(__name__)


def billing_error_response(error: BillingError) -> Response:
    """
    Render a billing error as an API response.

    Retryable provider errors map to 503, other provider errors to 502,
    anything else (misconfiguration) to 500.
    """
    if isinstance(error, ProviderRequestError):
        status_code = (
            status.HTTP_503_SERVICE_UNAVAILABLE
            if error.is_retryable
            else status.HTTP_502_BAD_GATEWAY
        )
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return Response(error.to_dict(), status=status_code)


class ProductListView(APIView):
    """
    List active products.

    GET /api/v1/billing/products/

    Returns:
        [{"id", "name", "description", "price", "price_id", "currency"}, ...]
    """

    permission_classes = [AllowAny]

    def get(self, request):
        try:
            products = async_to_sync(get_billing_service().fetch_active_products)()
        except BillingError as e:
            logger.warning(f"Product listing failed: {e}")
            return billing_error_response(e)

        return Response(ProductSerializer(products, many=True).data)


class CreateCheckoutSessionView(APIView):
    """
    Create a subscription Checkout session for the current user.

    POST /api/v1/billing/checkout/

    Request body:
        {
            "price_id": "price_xxx",
            "success_url": "https://example.com/success",
            "cancel_url": "https://example.com/cancel"
        }

    Returns:
        {"session_id": "cs_...", "checkout_url": "https://checkout.stripe.com/..."}
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CreateCheckoutSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            checkout = async_to_sync(get_billing_service().create_checkout_session)(
                user_id=str(request.user.pk),
                **serializer.validated_data,
            )
        except BillingError as e:
            logger.warning(
                f"Checkout session creation failed: {e}",
                extra={"user_id": str(request.user.pk)},
            )
            return billing_error_response(e)

        return Response({"session_id": checkout.id, "checkout_url": checkout.url})


class CreateBillingPortalView(APIView):
    """
    Create a Billing Portal session for the current user.

    POST /api/v1/billing/billing-portal/

    Request body:
        {"return_url": "https://example.com/settings"}

    Returns:
        {"portal_url": "https://billing.stripe.com/..."}
        or 404 when the user has no Stripe customer yet
    """

    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = CreateBillingPortalSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        customer_id = getattr(request.user, "stripe_customer_id", None)
        if not customer_id:
            return Response(
                {"detail": "No billing account found"},
                status=status.HTTP_404_NOT_FOUND,
            )

        try:
            portal = async_to_sync(get_billing_service().create_portal_session)(
                customer_id=customer_id,
                return_url=serializer.validated_data["return_url"],
            )
        except BillingError as e:
            logger.warning(
                f"Billing portal session creation failed: {e}",
                extra={"user_id": str(request.user.pk)},
            )
            return billing_error_response(e)

        return Response({"portal_url": portal.url})


class ConnectionStatusView(APIView):
    """
    Report whether the configured Stripe key works.

    GET /api/v1/billing/connection/

    Returns:
        200 {"status": "connected", "api_version", "app_version"}
        503 {"status": "error", "message"}
    """

    permission_classes = [IsAdminUser]

    def get(self, request):
        try:
            result = async_to_sync(get_billing_service().verify_connection)()
        except BillingError as e:
            return billing_error_response(e)

        status_code = (
            status.HTTP_200_OK
            if result["status"] == "connected"
            else status.HTTP_503_SERVICE_UNAVAILABLE
        )
        return Response(result, status=status_code)
