"""
Remote Gateway Error Taxonomy
=============================

Structured error hierarchy for calls made to the upstream MDM service.

Design principles:
- Base GatewayError with structured context
- Specific error types for classification
- No retries: every GatewayError aborts the operation that raised it
"""

from typing import Any, Dict, Optional

import httpx


class GatewayError(Exception):
    """
    Base exception for all remote gateway errors

    Provides structured error information:
    - message: Human-readable error description
    - operation: Which gateway operation raised the error
    - status_code: HTTP status code (if applicable)
    - url: Target URL (if applicable)
    - context: Additional error context
    - original_error: Wrapped exception (if any)
    """

    def __init__(
        self,
        message: str,
        operation: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        self.message = message
        self.operation = operation
        self.status_code = status_code
        self.url = url
        self.context = context or {}
        self.original_error = original_error

        parts = [f"[{operation}] {message}"]

        if status_code:
            parts.append(f"(HTTP {status_code})")
        if url:
            parts.append(f"(URL: {url})")

        super().__init__(" ".join(parts))

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "operation": self.operation,
            "status_code": self.status_code,
            "url": self.url,
            "context": self.context,
            "original_error": str(self.original_error) if self.original_error else None
        }


class GatewayAuthError(GatewayError):
    """
    Authentication/authorization error

    Common causes:
    - Invalid client id or secret
    - Token endpoint answered with an ``error`` member
    - Token response without ``access_token``
    - 401/403 from a resource endpoint
    """
    pass


class GatewayNetworkError(GatewayError):
    """
    Network communication error

    Common causes:
    - DNS resolution failure
    - TLS/SSL errors
    - Connection refused
    """
    pass


class GatewayTimeoutError(GatewayError):
    """
    Request exceeded the configured per-call timeout.
    """
    pass


class GatewayNotFound(GatewayError):
    """
    Resource not found (404), typically an unknown configuration id.
    """
    pass


class GatewayBadRequest(GatewayError):
    """
    Upstream rejected the request (4xx other than auth/not found).
    """
    pass


class GatewayServerError(GatewayError):
    """
    Upstream internal error (5xx).
    """
    pass


class GatewayProtocolError(GatewayError):
    """
    Upstream answered with a payload this adapter cannot interpret

    Common causes:
    - Response body is not valid JSON/XML
    - FHIR resource is not a Parameters resource
    - Pagination never terminates
    """
    pass


def classify_gateway_error(
    error: Exception,
    operation: str,
    url: Optional[str] = None
) -> GatewayError:
    """
    Classify an httpx exception into a GatewayError

    Args:
        error: Original exception
        operation: Gateway operation name
        url: Request URL if applicable

    Returns:
        GatewayError subclass instance

    Example:
        try:
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise classify_gateway_error(e, "fetch_match_configuration", url)
    """
    if isinstance(error, httpx.TimeoutException):
        return GatewayTimeoutError(
            f"Request timed out: {error}",
            operation=operation,
            url=url,
            original_error=error
        )

    if isinstance(error, httpx.HTTPStatusError):
        status_code = error.response.status_code

        if status_code in (401, 403):
            return GatewayAuthError(
                "Authentication failed",
                operation=operation,
                status_code=status_code,
                url=url,
                original_error=error
            )

        if status_code == 404:
            return GatewayNotFound(
                "Resource not found",
                operation=operation,
                status_code=status_code,
                url=url,
                original_error=error
            )

        if 400 <= status_code < 500:
            return GatewayBadRequest(
                "Bad request",
                operation=operation,
                status_code=status_code,
                url=url,
                original_error=error
            )

        return GatewayServerError(
            "Server error",
            operation=operation,
            status_code=status_code,
            url=url,
            original_error=error
        )

    if isinstance(error, httpx.TransportError):
        return GatewayNetworkError(
            f"Network error: {error}",
            operation=operation,
            url=url,
            original_error=error
        )

    return GatewayError(
        str(error),
        operation=operation,
        url=url,
        original_error=error
    )


__all__ = [
    "GatewayError",
    "GatewayAuthError",
    "GatewayNetworkError",
    "GatewayTimeoutError",
    "GatewayNotFound",
    "GatewayBadRequest",
    "GatewayServerError",
    "GatewayProtocolError",
    "classify_gateway_error",
]
