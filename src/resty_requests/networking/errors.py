"""Exception taxonomy for configuration building and the HTTP client."""

from __future__ import annotations


class RestyRequestsError(Exception):
    """Base class for all resty-requests errors."""


class ConfigurationError(RestyRequestsError, ValueError):
    """Raised when request options cannot be turned into a RequestConfig."""


class HeaderNormalizationError(ConfigurationError):
    """Raised when a header name cannot be canonicalized."""


class KeyValueShapeError(ConfigurationError):
    """Raised when a value is not a key/value container."""


class HttpClientError(RestyRequestsError):
    """Generic transport failure reported by HttpClient."""


class RetryableHttpError(HttpClientError):
    """Transport failure that may succeed on a later attempt."""


class RequestTimeoutError(RetryableHttpError):
    """The request exceeded one of its configured timeouts."""
