"""
Fulfillment dispatch for verified webhook events.

Only checkout.session.completed events carrying a userId in their session
metadata reach the fulfillment handler. Every other event passes through
untouched so the caller can still log or inspect it.

Deduplication across redeliveries is not done here. Stripe may deliver the
same event twice, even concurrently; the handler must be idempotent.

Usage:
    from billing.webhooks.dispatcher import FulfillmentDispatcher

    dispatcher = FulfillmentDispatcher()
    event = await dispatcher.dispatch(verified_event, grant_access)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from billing.exceptions import FulfillmentHandlerError
from billing.types import USER_ID_METADATA_KEY

if TYPE_CHECKING:
    from billing.types import FulfillmentHandler, VerifiedEvent


logger = logging.getLogger(__name__)


class FulfillmentDispatcher:
    """
    Decide whether a verified event is fulfillable and invoke the handler.

    Stateless; a single instance is shared by all webhook deliveries.
    """

    async def dispatch(
        self,
        event: VerifiedEvent,
        handler: FulfillmentHandler,
    ) -> VerifiedEvent:
        """
        Invoke the handler at most once for this event.

        Args:
            event: Event that already passed signature verification
            handler: Async callable taking (user_id, session)

        Returns:
            The same event instance, whether or not the handler ran

        Raises:
            FulfillmentHandlerError: The handler raised; the original
                exception is chained as __cause__
        """
        completion = event.checkout_completion()
        if completion is None:
            logger.debug(
                f"Ignoring {event.type} event",
                extra={"stripe_event_id": event.id, "event_type": event.type},
            )
            return event

        user_id = completion.user_id
        if not user_id:
            # Unattributable; skipped without raising so the webhook still acks
            logger.warning(
                f"Completed checkout session has no {USER_ID_METADATA_KEY} "
                "in metadata, skipping fulfillment",
                extra={
                    "stripe_event_id": event.id,
                    "checkout_session_id": completion.session_id,
                    "customer_id": completion.customer_id,
                },
            )
            return event

        log_context = {
            "stripe_event_id": event.id,
            "checkout_session_id": completion.session_id,
            "user_id": user_id,
        }
        logger.info("Dispatching checkout fulfillment", extra=log_context)

        try:
            await handler(user_id, completion.session)
        except FulfillmentHandlerError:
            logger.error("Fulfillment handler failed", extra=log_context)
            raise
        except Exception as e:
            logger.error(
                f"Fulfillment handler failed: {type(e).__name__}",
                extra=log_context,
                exc_info=True,
            )
            raise FulfillmentHandlerError(
                f"Fulfillment handler failed: {e}",
                details={
                    "stripe_event_id": event.id,
                    "checkout_session_id": completion.session_id,
                    "user_id": user_id,
                },
            ) from e

        logger.info("Checkout fulfillment completed", extra=log_context)
        return event
