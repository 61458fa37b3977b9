"""Unified error taxonomy shared by every provider"""

from enum import Enum


class ProviderErrorKind(str, Enum):
    """Classification of provider failures; callers pick retry/compaction policy from this"""
    AUTHENTICATION = "authentication"
    REQUEST_FAILED = "request_failed"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    CONTEXT_LENGTH_EXCEEDED = "context_length_exceeded"
    SERVER_ERROR = "server_error"
    USAGE_ERROR = "usage_error"


class ProviderError(Exception):
    """Base class for failures raised by ``Provider.complete``"""

    kind: ProviderErrorKind
    label = "Provider error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{self.label}: {detail}")


class AuthenticationError(ProviderError):
    kind = ProviderErrorKind.AUTHENTICATION
    label = "Authentication error"


class RequestFailedError(ProviderError):
    kind = ProviderErrorKind.REQUEST_FAILED
    label = "Request failed"


class RateLimitExceededError(ProviderError):
    # TODO: parse retry-after headers into a field once callers implement backoff
    kind = ProviderErrorKind.RATE_LIMIT_EXCEEDED
    label = "Rate limit exceeded"


class ContextLengthExceededError(ProviderError):
    kind = ProviderErrorKind.CONTEXT_LENGTH_EXCEEDED
    label = "Context length exceeded"


class ServerError(ProviderError):
    kind = ProviderErrorKind.SERVER_ERROR
    label = "Server error"


class UsageError(ProviderError):
    """Usage data missing or malformed in an otherwise successful response"""
    kind = ProviderErrorKind.USAGE_ERROR
    label = "Usage data error"


__all__ = [
    "ProviderErrorKind",
    "ProviderError",
    "AuthenticationError",
    "RequestFailedError",
    "RateLimitExceededError",
    "ContextLengthExceededError",
    "ServerError",
    "UsageError",
]
