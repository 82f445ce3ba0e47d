"""
Default fulfillment handler.

Host applications point BILLING_FULFILLMENT_HANDLER at their own async
callable that grants access and persists the subscription. This default only
logs, so a freshly configured deployment acknowledges webhooks without
granting anything.
"""

from __future__ import annotations

import logging
from typing import Any

from billing.types import CheckoutCompletion

logger = logging.getLogger(__name__)


async def log_fulfillment(user_id: str, session: Any) -> None:
    """Log a completed checkout without fulfilling it."""
    completion = CheckoutCompletion.from_session(session)
    logger.warning(
        "No fulfillment handler configured; checkout completed without fulfillment",
        extra={
            "user_id": user_id,
            "checkout_session_id": completion.session_id,
            "customer_id": completion.customer_id,
            "subscription_id": completion.subscription_id,
        },
    )
