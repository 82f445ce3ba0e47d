"""
Tests for BillingService.

Tests cover:
- Async catalog, checkout and billing portal calls
- Webhook verification followed by fulfillment dispatch
- verify_connection reporting failures as data
- Settings-backed service and fulfillment handler lookup
"""

from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
import stripe
from django.test import override_settings

from billing.exceptions import (
    ConfigurationError,
    FulfillmentHandlerError,
    ProviderRateLimitError,
    SignatureVerificationError,
)
from billing.fulfillment import log_fulfillment
from billing.services import (
    BillingService,
    get_billing_service,
    get_fulfillment_handler,
    reset_billing_service,
)


@pytest.fixture
def service(service_config):
    return BillingService(service_config)


@pytest.fixture(autouse=True)
def clear_cached_service():
    reset_billing_service()
    yield
    reset_billing_service()


class TestFetchActiveProducts:
    """Tests for BillingService.fetch_active_products."""

    @pytest.mark.asyncio
    async def test_returns_summaries(self, service):
        products = SimpleNamespace(
            data=[
                {
                    "id": "prod_basic",
                    "name": "Basic",
                    "description": None,
                    "default_price": {
                        "id": "price_basic",
                        "unit_amount": 900,
                        "currency": "usd",
                    },
                }
            ]
        )

        with patch("stripe.Product") as mock_product:
            mock_product.list.return_value = products
            result = await service.fetch_active_products()

        assert len(result) == 1
        assert result[0].price == Decimal("9")
        assert result[0].price_id == "price_basic"

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self, service):
        with patch("stripe.Product") as mock_product:
            mock_product.list.side_effect = stripe.RateLimitError("Too many requests")

            with pytest.raises(ProviderRateLimitError):
                await service.fetch_active_products()

    @pytest.mark.asyncio
    async def test_not_cached(self, service):
        """Every call reflects Stripe's state at call time."""
        with patch("stripe.Product") as mock_product:
            mock_product.list.return_value = SimpleNamespace(data=[])
            await service.fetch_active_products()
            await service.fetch_active_products()

        assert mock_product.list.call_count == 2


class TestCreateCheckoutSession:
    """Tests for BillingService.create_checkout_session."""

    @pytest.mark.asyncio
    async def test_user_id_stringified_into_metadata(self, service):
        session = SimpleNamespace(
            id="cs_test_1",
            url="https://checkout.stripe.com/c/pay/cs_test_1",
            metadata={"userId": "42"},
        )

        with patch("stripe.checkout.Session") as mock_session:
            mock_session.create.return_value = session
            result = await service.create_checkout_session(
                user_id=42,
                price_id="price_test123",
                success_url="https://example.com/success",
                cancel_url="https://example.com/cancel",
            )

        call_kwargs = mock_session.create.call_args.kwargs
        assert call_kwargs["metadata"] == {"userId": "42"}
        assert call_kwargs["subscription_data"] == {"metadata": {"userId": "42"}}
        assert result.id == "cs_test_1"
        assert result.url == "https://checkout.stripe.com/c/pay/cs_test_1"


class TestCreatePortalSession:
    """Tests for BillingService.create_portal_session."""

    @pytest.mark.asyncio
    async def test_returns_portal_url(self, service):
        portal = SimpleNamespace(
            id="bps_1", url="https://billing.stripe.com/p/session/test_1"
        )

        with patch("stripe.billing_portal.Session") as mock_session:
            mock_session.create.return_value = portal
            result = await service.create_portal_session(
                customer_id="cus_1", return_url="https://example.com/settings"
            )

        assert result.url == "https://billing.stripe.com/p/session/test_1"
        mock_session.create.assert_called_once()


class TestHandleWebhook:
    """Tests for BillingService.handle_webhook."""

    @pytest.mark.asyncio
    async def test_verifies_then_dispatches(self, service, event_payload, sign):
        handler = AsyncMock(return_value=None)
        payload = event_payload(metadata={"userId": "u1"})

        event = await service.handle_webhook(payload, sign(payload), handler)

        assert event.id == "evt_test123"
        assert event.type == "checkout.session.completed"
        handler.assert_awaited_once()
        assert handler.await_args.args[0] == "u1"

    @pytest.mark.asyncio
    async def test_invalid_signature_never_dispatches(
        self, service, event_payload, sign
    ):
        handler = AsyncMock(return_value=None)
        payload = event_payload(metadata={"userId": "u1"})

        with pytest.raises(SignatureVerificationError):
            await service.handle_webhook(
                payload, sign(payload, secret="whsec_other"), handler
            )

        handler.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_handler_failure_propagates(self, service, event_payload, sign):
        handler = AsyncMock(side_effect=ValueError("boom"))
        payload = event_payload(metadata={"userId": "u1"})

        with pytest.raises(FulfillmentHandlerError) as exc_info:
            await service.handle_webhook(payload, sign(payload), handler)

        assert isinstance(exc_info.value.__cause__, ValueError)

    @pytest.mark.asyncio
    async def test_redelivery_calls_handler_again(self, service, event_payload, sign):
        """No deduplication: the same delivery twice fulfills twice."""
        handler = AsyncMock(return_value=None)
        payload = event_payload(metadata={"userId": "u1"})
        signature = sign(payload)

        await service.handle_webhook(payload, signature, handler)
        await service.handle_webhook(payload, signature, handler)

        assert handler.await_count == 2

    @pytest.mark.asyncio
    async def test_default_fulfillment_handler(self, service, event_payload, sign):
        """The logging default accepts completed sessions without raising."""
        payload = event_payload(metadata={"userId": "u1"})

        event = await service.handle_webhook(payload, sign(payload), log_fulfillment)

        assert event.is_checkout_completed


class TestVerifyConnection:
    """Tests for BillingService.verify_connection."""

    @pytest.mark.asyncio
    async def test_connected(self, service, service_config):
        with patch("stripe.Balance") as mock_balance:
            mock_balance.retrieve.return_value = {"object": "balance"}
            result = await service.verify_connection()

        assert result == {
            "status": "connected",
            "api_version": service_config.required_api_version,
            "app_version": service_config.app_version,
        }

    @pytest.mark.asyncio
    async def test_authentication_failure_reported(self, service):
        with patch("stripe.Balance") as mock_balance:
            mock_balance.retrieve.side_effect = stripe.AuthenticationError(
                "Invalid API Key provided"
            )
            result = await service.verify_connection()

        assert result["status"] == "error"
        assert "Invalid API Key" in result["message"]

    @pytest.mark.asyncio
    async def test_connection_failure_reported(self, service):
        with patch("stripe.Balance") as mock_balance:
            mock_balance.retrieve.side_effect = stripe.APIConnectionError(
                "Network down"
            )
            result = await service.verify_connection()

        assert result == {
            "status": "error",
            "message": "Could not connect to Stripe. Please retry.",
        }


class TestSettingsBackedService:
    """Tests for get_billing_service and get_fulfillment_handler."""

    @override_settings(
        STRIPE_SECRET_KEY="sk_test_settings",
        STRIPE_WEBHOOK_SECRET="whsec_settings",
        BILLING_APP_NAME="settings-app",
    )
    def test_service_is_cached(self):
        first = get_billing_service()
        second = get_billing_service()

        assert first is second
        assert first.config.app_name == "settings-app"

    @override_settings(
        STRIPE_SECRET_KEY="sk_test_settings",
        STRIPE_WEBHOOK_SECRET="whsec_settings",
    )
    def test_reset_rebuilds(self):
        first = get_billing_service()
        reset_billing_service()

        assert get_billing_service() is not first

    @override_settings(STRIPE_SECRET_KEY="", STRIPE_WEBHOOK_SECRET="")
    def test_unconfigured_settings_raise(self):
        with pytest.raises(ConfigurationError):
            get_billing_service()

    def test_default_fulfillment_handler(self):
        assert get_fulfillment_handler() is log_fulfillment

    @override_settings(BILLING_FULFILLMENT_HANDLER="billing.tests.test_services.grant")
    def test_custom_fulfillment_handler(self):
        assert get_fulfillment_handler() is grant


async def grant(user_id, session):
    """Importable handler used by test_custom_fulfillment_handler."""
