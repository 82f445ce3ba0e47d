"""
Project-wide pytest configuration.

This module configures pytest-django and provides fixtures shared by every
billing test package. Package-specific fixtures are defined in each
package's tests/conftest.py.
"""

import hashlib
import hmac
import json
import os
import time

import django
import pytest

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_views.py → integration (request/response through Django and DRF)
    - everything else → unit

    Explicit markers on test functions/classes take precedence.
    """
    integration_patterns = ["test_views.py"]

    for item in items:
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Shared Billing Fixtures
# =============================================================================

TEST_API_KEY = "sk_test_dummy_key_for_testing"
TEST_WEBHOOK_SECRET = "whsec_test_secret"
TEST_API_VERSION = "2025-01-27.acacia"
TEST_APP_VERSION = "1.0.1"


@pytest.fixture
def service_config():
    """A valid ServiceConfig for a test-mode account."""
    from billing.config import ServiceConfig

    return ServiceConfig(
        api_key=TEST_API_KEY,
        webhook_signing_secret=TEST_WEBHOOK_SECRET,
        app_version=TEST_APP_VERSION,
        required_api_version=TEST_API_VERSION,
        app_name="test-app",
    )


def sign_payload(payload, secret=TEST_WEBHOOK_SECRET, timestamp=None):
    """
    Build a Stripe-Signature header for a payload.

    Same scheme as Stripe: HMAC-SHA256 over "{timestamp}.{payload}".
    """
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")
    timestamp = int(time.time()) if timestamp is None else timestamp
    signed_payload = f"{timestamp}.{payload}".encode("utf-8")
    signature = hmac.new(
        secret.encode("utf-8"), signed_payload, hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


@pytest.fixture
def sign():
    """Expose sign_payload as a fixture."""
    return sign_payload


@pytest.fixture
def event_payload():
    """Build a raw Stripe event body (bytes)."""

    def _create(
        event_type: str = "checkout.session.completed",
        event_id: str = "evt_test123",
        metadata: dict | None = None,
        session_id: str = "cs_test_123",
        customer: str | None = "cus_test123",
        subscription: str | None = "sub_test123",
    ) -> bytes:
        if event_type == "checkout.session.completed":
            data_object = {
                "id": session_id,
                "object": "checkout.session",
                "mode": "subscription",
                "status": "complete",
                "customer": customer,
                "subscription": subscription,
                "metadata": {} if metadata is None else metadata,
            }
        else:
            data_object = {
                "id": "in_test123",
                "object": "invoice",
                "customer": customer,
                "metadata": {} if metadata is None else metadata,
            }
        body = {
            "id": event_id,
            "object": "event",
            "api_version": TEST_API_VERSION,
            "created": int(time.time()),
            "livemode": False,
            "type": event_type,
            "data": {"object": data_object},
        }
        return json.dumps(body).encode("utf-8")

    return _create
