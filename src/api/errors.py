from typing import Any, Optional

import httpx

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."


class GatewayError(Exception):
    """Base class for every failure raised by the request gateway."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ApiError(GatewayError):
    """The backend answered with an error status."""

    def __init__(self, status: int, message: str, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ApiError":
        try:
            payload = response.json()
        except ValueError:
            payload = None

        message = None
        if isinstance(payload, dict):
            message = payload.get("message") or payload.get("error")
        if not message:
            message = f"Request failed with status code {response.status_code}"
        return cls(response.status_code, message, payload)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, message={self.message!r})"


class AuthorizationError(ApiError):
    """A 401 that survived a credential refresh; never retried again."""


class TransportError(GatewayError):
    """The request never got an HTTP answer (DNS, refused, timeout...)."""


class RefreshError(GatewayError):
    """The refresh credential could not be exchanged for a new access credential."""


def describe(exc: GatewayError, fallback: str) -> str:
    """
    Turn a gateway failure into the message a view shows inline.

    Backend validation/conflict messages are kept verbatim, transport
    failures fall back to the generic text of the calling operation.
    """
    if isinstance(exc, RefreshError):
        return SESSION_EXPIRED_MESSAGE
    if isinstance(exc, ApiError) and isinstance(exc.payload, dict):
        message: Optional[str] = exc.payload.get("message")
        if message:
            return message
    return fallback
