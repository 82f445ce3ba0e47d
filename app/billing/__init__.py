"""
Billing app for Stripe subscription integration.

This app handles:
- Active product listing with default prices
- Subscription checkout sessions that carry the application user ID
- Webhook signature verification and checkout fulfillment dispatch
- Billing portal sessions
- Stripe connectivity checks

Several applications can share this package; each builds its own
BillingService from its own ServiceConfig.

Usage:
    from billing.config import ServiceConfig
    from billing.services import BillingService

    service = BillingService(ServiceConfig(...))
    event = await service.handle_webhook(body, signature, grant_access)

Note:
    Nothing is imported here so the package can be loaded before Django's
    app registry is ready. Import from the submodules directly.
"""
