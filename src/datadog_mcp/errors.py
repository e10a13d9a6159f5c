"""Datadog error types and status classification."""

from enum import Enum
from typing import Any, Optional


class DatadogError(Exception):
    """Base class for errors raised by the Datadog tools."""


class ConfigurationError(DatadogError):
    """A required credential is missing at startup."""


class CredentialsError(DatadogError):
    """Credentials were not available when a tool was executed."""


class ParameterError(DatadogError, ValueError):
    """A required tool parameter is missing or empty."""

    def __init__(self, field: str):
        super().__init__(f"{field} is required")
        self.field = field


class AuthorizationError(DatadogError):
    """Datadog rejected the keys (403)."""


class RateLimitError(DatadogError):
    """Datadog rate limit exceeded (429)."""


class NotFoundError(DatadogError):
    """The requested resource does not exist (404)."""


class DatadogAPIError(DatadogError):
    """Non-success HTTP status returned by the Datadog API."""

    def __init__(self, status: int, message: str, body: Optional[Any] = None):
        super().__init__(f"Datadog API returned status {status}: {message}")
        self.status = status
        self.body = body


class ErrorKind(str, Enum):
    AUTHORIZATION = "authorization"
    RATE_LIMIT = "rate_limit"
    NOT_FOUND = "not_found"
    UNCLASSIFIED = "unclassified"


def classify(status: Optional[int], has_quota: bool = False, has_not_found: bool = False) -> ErrorKind:
    """Map an HTTP status onto the error kind a tool should surface.

    429 and 404 are only translated for tools that declare a quota or a
    not-found message; otherwise they pass through unchanged.
    """
    if status == 403:
        return ErrorKind.AUTHORIZATION
    if status == 429 and has_quota:
        return ErrorKind.RATE_LIMIT
    if status == 404 and has_not_found:
        return ErrorKind.NOT_FOUND
    return ErrorKind.UNCLASSIFIED
