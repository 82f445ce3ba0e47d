"""
Core Application - Infrastructure & Base Classes

This app contains infrastructure code shared by domain apps:

- Generic, reusable base classes (no domain-specific logic)
- Infrastructure endpoints (health check)

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ExternalServiceError: Third-party service failures

Views (import from core.views):
    - health_check: Liveness endpoint

Usage:
    from core.exceptions import BaseApplicationError

    class BillingError(BaseApplicationError):
        default_error_code = "BILLING_ERROR"

Note:
    - Business logic should NOT go here. Extend core classes in your domain apps.
"""

from .exceptions import BaseApplicationError, ExternalServiceError

__all__ = [
    "BaseApplicationError",
    "ExternalServiceError",
]
