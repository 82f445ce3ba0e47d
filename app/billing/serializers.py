"""
DRF serializers for the billing app.

This module provides serializers for:
- Product catalog responses
- Checkout session requests
- Billing portal requests

Related files:
    - types.py: ProductSummary
    - views.py: Billing API views
"""

from __future__ import annotations

from rest_framework import serializers


class ProductSerializer(serializers.Serializer):
    """
    Active product at its default price.

    The price is rendered as a decimal string in major units ("25.99").
    """

    id = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True, allow_null=True)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    price_id = serializers.CharField(read_only=True)
    currency = serializers.CharField(read_only=True)


class CreateCheckoutSessionSerializer(serializers.Serializer):
    """
    Checkout session request.

    Request body:
        {
            "price_id": "price_xxx",
            "success_url": "https://example.com/success",
            "cancel_url": "https://example.com/cancel"
        }
    """

    price_id = serializers.CharField(max_length=255)
    success_url = serializers.URLField()
    cancel_url = serializers.URLField()

    def validate_price_id(self, value: str) -> str:
        if not value.startswith("price_"):
            raise serializers.ValidationError("Must be a Stripe price ID (price_...).")
        return value


class CreateBillingPortalSerializer(serializers.Serializer):
    """Billing portal request: {"return_url": "https://example.com/settings"}."""

    return_url = serializers.URLField()
