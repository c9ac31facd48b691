from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from .response import ShippingApiResponse


class SDKError(Exception):
    """Base error for SDK exceptions (transport/runtime)."""

    def __init__(self, message: str = "", code: str | None = None, details: dict | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


class AuthError(SDKError):
    """Missing or unusable API credentials."""

    pass


class BadRequestError(SDKError):
    """Invalid arguments supplied by the caller."""

    pass


class DeserializationError(SDKError):
    """Response payload could not be converted to the expected type."""

    def __init__(self, message: str = "", payload: Any = None) -> None:
        super().__init__(message, code="deserialization_error", details={"payload": payload})


class ShippingAPIError(SDKError):
    """A call failed while the session was configured to raise on failure.

    The full response envelope is attached as ``response``.
    """

    def __init__(self, response: "ShippingApiResponse", message: str | None = None) -> None:
        if message is None:
            first = response.errors[0] if response.errors else None
            message = f"{response.http_status}: {first.message}" if first else f"HTTP {response.http_status}"
        super().__init__(message, code="api_error", details={"http_status": response.http_status})
        self.response = response

    @property
    def errors(self):
        return self.response.errors

    @property
    def http_status(self) -> int | None:
        return self.response.http_status
