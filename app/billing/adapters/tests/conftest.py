"""
Pytest fixtures for Stripe adapter tests.

This module provides fixtures for testing the Stripe adapter, including
mock Stripe API responses and error conditions.

Sections:
    - Mock Stripe Response Fixtures
    - Mock Stripe Error Fixtures
    - Mock Stripe Client Fixtures
"""

from dataclasses import dataclass
from typing import Any
from unittest.mock import patch

import pytest
import stripe


# =============================================================================
# Mock Stripe Response Fixtures
# =============================================================================


@dataclass
class MockStripeObject:
    """Mock Stripe API object with to_dict support."""

    data: dict[str, Any]

    def __getattr__(self, name: str) -> Any:
        if name == "data":
            return self.__dict__["data"]
        return self.data.get(name)

    def to_dict(self) -> dict[str, Any]:
        return self.data


@dataclass
class MockStripeList:
    """Mock Stripe list response with data attribute."""

    items: list[MockStripeObject]
    has_more: bool = False

    @property
    def data(self) -> list[MockStripeObject]:
        return self.items


@pytest.fixture
def mock_price():
    """Create a mock Price response."""

    def _create(
        id: str = "price_test123",
        unit_amount: int | None = 2599,
        currency: str | None = "usd",
        recurring: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "price",
                "unit_amount": unit_amount,
                "currency": currency,
                "recurring": recurring or {"interval": "month"},
            }
        )

    return _create


@pytest.fixture
def mock_product(mock_price):
    """Create a mock Product response with an expanded default price."""

    def _create(
        id: str = "prod_test123",
        name: str = "Pro Plan",
        description: str | None = "Everything in Pro",
        default_price: Any = "default",
    ) -> MockStripeObject:
        if default_price == "default":
            default_price = mock_price()
        return MockStripeObject(
            {
                "id": id,
                "object": "product",
                "active": True,
                "name": name,
                "description": description,
                "default_price": default_price,
            }
        )

    return _create


@pytest.fixture
def mock_checkout_session():
    """Create a mock Checkout Session response."""

    def _create(
        id: str = "cs_test_a1b2c3",
        url: str = "https://checkout.stripe.com/c/pay/cs_test_a1b2c3",
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "checkout.session",
                "mode": "subscription",
                "url": url,
                "metadata": metadata if metadata is not None else {"userId": "u42"},
            }
        )

    return _create


@pytest.fixture
def mock_portal_session():
    """Create a mock Billing Portal session response."""

    def _create(
        id: str = "bps_test123",
        url: str = "https://billing.stripe.com/p/session/test_123",
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "billing_portal.session",
                "url": url,
            }
        )

    return _create


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def card_error():
    """Create a Stripe CardError."""
    return stripe.CardError(
        message="Your card was declined.",
        param=None,
        code="card_declined",
    )


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""

    def _create(
        message: str = "No such price: 'price_missing'",
        param: str | None = "line_items[0][price]",
        code: str = "resource_missing",
    ) -> stripe.InvalidRequestError:
        return stripe.InvalidRequestError(
            message=message,
            param=param,
            code=code,
        )

    return _create


@pytest.fixture
def rate_limit_error():
    """Create a Stripe RateLimitError."""
    return stripe.RateLimitError(
        message="Too many requests hit the API too quickly.",
    )


@pytest.fixture
def api_connection_error():
    """Create a Stripe APIConnectionError."""
    return stripe.APIConnectionError(
        message="Could not connect to Stripe.",
    )


@pytest.fixture
def api_error():
    """Create a Stripe APIError."""
    return stripe.APIError(
        message="Something went wrong on Stripe's end.",
    )


@pytest.fixture
def authentication_error():
    """Create a Stripe AuthenticationError."""
    return stripe.AuthenticationError(
        message="Invalid API Key provided: sk_test_********ting",
    )


# =============================================================================
# Mock Stripe Client Fixtures
# =============================================================================


@pytest.fixture
def mock_stripe_product(mock_product):
    """Mock stripe.Product API."""
    with patch("stripe.Product") as mock:
        mock.list.return_value = MockStripeList(items=[mock_product()])
        yield mock


@pytest.fixture
def mock_stripe_checkout_session(mock_checkout_session):
    """Mock stripe.checkout.Session API."""
    with patch("stripe.checkout.Session") as mock:
        mock.create.return_value = mock_checkout_session()
        yield mock


@pytest.fixture
def mock_stripe_portal_session(mock_portal_session):
    """Mock stripe.billing_portal.Session API."""
    with patch("stripe.billing_portal.Session") as mock:
        mock.create.return_value = mock_portal_session()
        yield mock


@pytest.fixture
def mock_stripe_balance():
    """Mock stripe.Balance API."""
    with patch("stripe.Balance") as mock:
        mock.retrieve.return_value = MockStripeObject(
            {"object": "balance", "available": [], "pending": []}
        )
        yield mock
