"""Custom exception hierarchy for crabo."""

from typing import Any


class CraboError(Exception):
    """Base exception for all crabo errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(CraboError):
    """Component was constructed with inconsistent parameters."""

    pass


class ClientError(CraboError):
    """HTTP request did not produce a usable response."""

    def __init__(
        self,
        message: str,
        url: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.url = url


class TransportError(ClientError):
    """Network level failure: DNS, connection, timeout, protocol."""

    pass


class UnexpectedStatusError(ClientError):
    """Server responded with a non-2xx status code."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, url, details)
        self.status_code = status_code


class SuppressedError(ClientError):
    """Request was not made because the server is flagged as unreliable."""

    pass


class ResponseParseError(ClientError):
    """Response body could not be decoded into the expected shape."""

    pass


class CacheError(CraboError):
    """Cache operation failed."""

    pass
