"""
Data types for billing operations.

Stripe SDK objects are loosely typed; these dataclasses give the rest of the
package (and host applications) stable shapes to work with. Every result
keeps the untouched Stripe response in raw_response (or raw, for events).

Types:
    ProductSummary: Active product at its default price
    CheckoutSessionResult: Created Checkout Session
    PortalSessionResult: Created Billing Portal session
    VerifiedEvent: Webhook event that passed signature verification
    CheckoutCompletion: Payload of a checkout.session.completed event
    FulfillmentHandler: Async callable invoked for completed checkouts
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"

# Metadata key linking a Stripe object back to the application user
USER_ID_METADATA_KEY = "userId"


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    """Read a field from a Stripe object, a plain dict or None."""
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def to_plain_dict(obj: Any) -> dict[str, Any]:
    """Convert a Stripe object (or mapping) to a plain dict."""
    if obj is None:
        return {}
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return dict(to_dict())
    if isinstance(obj, Mapping):
        return dict(obj)
    return {}


@dataclass
class ProductSummary:
    """
    Active Stripe product at its default price.

    Attributes:
        id: Product ID (prod_xxx)
        name: Display name
        description: Optional description
        price: Default price in major units (e.g. Decimal("25.99"))
        price_id: Default price ID (price_xxx)
        currency: Lowercase ISO 4217 code
    """

    id: str
    name: str
    description: str | None
    price: Decimal
    price_id: str
    currency: str


@dataclass
class CheckoutSessionResult:
    """
    Result of creating a Stripe Checkout Session.

    Attributes:
        id: Checkout Session ID (cs_xxx)
        url: Stripe-hosted URL to redirect the customer to
        metadata: Metadata attached to the session
        raw_response: Full Stripe response
    """

    id: str
    url: str | None
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: Any = None


@dataclass
class PortalSessionResult:
    """
    Result of creating a Stripe Billing Portal session.

    Attributes:
        id: Portal session ID (bps_xxx)
        url: Stripe-hosted billing management URL
        raw_response: Full Stripe response
    """

    id: str
    url: str
    raw_response: Any = None


@dataclass
class CheckoutCompletion:
    """
    The session carried by a checkout.session.completed event.

    Attributes:
        session_id: Checkout Session ID (cs_xxx)
        customer_id: Stripe Customer ID, if one was created or attached
        subscription_id: Subscription ID created by the checkout, if any
        metadata: Session metadata (userId lives here)
        session: The session object as delivered by Stripe
    """

    session_id: str
    customer_id: str | None
    subscription_id: str | None
    metadata: dict[str, str]
    session: Any

    @property
    def user_id(self) -> str | None:
        """The application user ID propagated through checkout, if any."""
        return self.metadata.get(USER_ID_METADATA_KEY) or None

    @classmethod
    def from_session(cls, session: Any) -> CheckoutCompletion:
        metadata = {
            str(key): str(value)
            for key, value in to_plain_dict(get_field(session, "metadata")).items()
            if value is not None
        }
        return cls(
            session_id=get_field(session, "id"),
            customer_id=get_field(session, "customer"),
            subscription_id=get_field(session, "subscription"),
            metadata=metadata,
            session=session,
        )


@dataclass
class VerifiedEvent:
    """
    A webhook event whose signature has been verified.

    Only the checkout.session.completed variant is interpreted (see
    checkout_completion); every other type is carried opaquely.

    Attributes:
        id: Event ID (evt_xxx)
        type: Event type (e.g. "checkout.session.completed")
        data_object: The event's data.object
        created: Unix timestamp of event creation
        livemode: Whether the event came from live mode
        raw: The stripe.Event returned by the SDK
    """

    id: str
    type: str
    data_object: Any
    created: int | None = None
    livemode: bool = False
    raw: Any = None

    @classmethod
    def from_stripe(cls, event: Any) -> VerifiedEvent:
        return cls(
            id=get_field(event, "id"),
            type=get_field(event, "type"),
            data_object=get_field(get_field(event, "data"), "object"),
            created=get_field(event, "created"),
            livemode=bool(get_field(event, "livemode", False)),
            raw=event,
        )

    @property
    def is_checkout_completed(self) -> bool:
        return self.type == CHECKOUT_SESSION_COMPLETED

    def checkout_completion(self) -> CheckoutCompletion | None:
        """Return the completed session view, or None for other event types."""
        if not self.is_checkout_completed:
            return None
        return CheckoutCompletion.from_session(self.data_object)


@runtime_checkable
class FulfillmentHandler(Protocol):
    """
    Protocol for fulfillment callbacks.

    Any async callable taking (user_id, session) qualifies. The handler owns
    persistence and must be idempotent: Stripe may deliver the same event
    more than once, possibly concurrently.

    Example:
        async def grant_access(user_id: str, session) -> None:
            await Subscription.objects.aupdate_or_create(
                user_id=user_id,
                defaults={"stripe_customer_id": session.customer},
            )
    """

    async def __call__(self, user_id: str, session: Any) -> None: ...
