"""
Base exception classes for application-wide error handling.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling
- Detailed error information for debugging

Exception Hierarchy:
    BaseApplicationError (base)
    └── ExternalServiceError - Third-party service failures

Domain packages extend BaseApplicationError with their own subtrees
(see billing.exceptions).

Usage:
    from core.exceptions import BaseApplicationError

    # Raise with message only
    raise BaseApplicationError("Something went wrong")

    # Raise with error code and details
    raise BaseApplicationError(
        "Checkout failed",
        error_code="CHECKOUT_FAILED",
        details={"price_id": "price_123"}
    )

    # Convert to dict for API response
    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=400)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Provides a consistent interface for error handling across the application.
    All custom exceptions should inherit from this class.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)

    Example:
        try:
            service.create_checkout_session(...)
        except BaseApplicationError as e:
            logger.warning(f"Checkout failed: {e.error_code}")
            return Response(e.to_dict(), status=502)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            error_code: Machine-readable error code (defaults to class default)
            details: Additional error context
        """
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Returns:
            Dict with error, error_code, and details keys

        Example:
            {
                "error": "Stripe rate limit exceeded",
                "error_code": "PROVIDER_RATE_LIMITED",
                "details": {"provider_code": "rate_limit"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Use for:
    - Third-party API failures (Stripe)
    - Network timeouts
    - External service unavailability
    - Unexpected external service responses

    Note:
        Log the original error for debugging but don't expose
        internal details to clients in production.
        HTTP 502 Bad Gateway or 503 Service Unavailable are appropriate.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
