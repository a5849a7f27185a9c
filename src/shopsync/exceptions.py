"""Custom exception hierarchy for shopsync."""

from __future__ import annotations


class ShopSyncError(Exception):
    """Base exception for all shopsync errors."""


class ShopSyncConfigError(ShopSyncError):
    """Invalid or missing configuration."""


class NetworkError(ShopSyncError):
    """HTTP-level failure (connection error, timeout, non-2xx status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class AccessForbiddenError(NetworkError):
    """Server answered 403 for the current account/shop."""


class MalformedPayloadError(ShopSyncError):
    """Response body is not JSON or has no recognizable shape."""

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class IdentifierUnparseableError(ShopSyncError):
    """Search text is not a valid numeric identifier."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Not a numeric identifier: {text!r}")


class SessionMissingError(ShopSyncError):
    """No credential or shop scope available from the session provider."""
