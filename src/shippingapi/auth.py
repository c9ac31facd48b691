"""OAuth client-credentials token provider."""

from __future__ import annotations

import base64
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict

from .errors import AuthError
from .response import ErrorDetail, HttpVerb, ShippingApiRequest, ShippingApiResponse

if TYPE_CHECKING:  # pragma: no cover
    from .session import Session

logger = logging.getLogger(__name__)

# refresh slightly before the server-side expiry
EXPIRY_SKEW_SECONDS = 30.0


def _as_float(value: Any) -> float | None:
    if value in (None, ""):
        return None
    return float(value)


def _first_present(data: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


@dataclass(frozen=True)
class AuthToken:
    access_token: str
    token_type: str = "BearerToken"
    issued_at: float | None = None  # epoch seconds
    expires_in: float | None = None  # seconds
    client_id: str | None = None
    org: str | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthToken":
        access_token = data.get("access_token") or data.get("accessToken")
        if not access_token:
            raise ValueError("token response has no access_token")
        issued_at = _as_float(data.get("issuedAt"))
        if issued_at is not None and issued_at > 1e11:
            # the OAuth endpoint reports milliseconds
            issued_at = issued_at / 1000.0
        return cls(
            access_token=access_token,
            token_type=data.get("tokenType") or data.get("token_type") or "BearerToken",
            issued_at=issued_at,
            expires_in=_as_float(_first_present(data, "expiresIn", "expires_in")),
            client_id=data.get("clientID"),
            org=data.get("org"),
        )

    @property
    def expires_at(self) -> float | None:
        if self.issued_at is None or self.expires_in is None:
            return None
        return self.issued_at + self.expires_in

    def is_expired(self, now: float | None = None) -> bool:
        expires_at = self.expires_at
        if expires_at is None:
            return False
        now = time.time() if now is None else now
        return now >= expires_at - EXPIRY_SKEW_SECONDS


class TokenRequest(ShippingApiRequest):
    content_type = "application/x-www-form-urlencoded"
    authorization_scheme = "Basic"

    def __init__(self, api_key: str | None, api_secret: str | None) -> None:
        super().__init__()
        if not api_key or not api_secret:
            raise AuthError("api_key and api_secret are required to request a token")
        raw = f"{api_key}:{api_secret}".encode("utf-8")
        self.authorization = base64.b64encode(raw).decode("ascii")

    def body(self) -> Dict[str, str]:
        return {"grant_type": "client_credentials"}


def _token_uri(session: "Session") -> str:
    return session.base_url.rstrip("/") + session.token_path


def _credentials_missing(exc: AuthError) -> ShippingApiResponse[AuthToken]:
    logger.warning("token request not sent: %s", exc)
    return ShippingApiResponse(errors=[ErrorDetail("credentials_missing", str(exc))], http_status=401)


def _checked(response: ShippingApiResponse) -> ShippingApiResponse[AuthToken]:
    if response.success and not isinstance(response.api_response, AuthToken):
        response.errors.append(ErrorDetail("invalid_token_response", "token endpoint returned no access token"))
    return response


def _log_outcome(response: ShippingApiResponse[AuthToken]) -> None:
    if response.success:
        logger.info("acquired access token (expires_in=%s)", response.api_response.expires_in)
    else:
        codes = [e.error_code for e in response.errors]
        logger.warning("token request failed: status=%s errors=%s", response.http_status, codes)


def fetch_token(session: "Session") -> ShippingApiResponse[AuthToken]:
    """Request a new bearer token with the session's credentials."""
    try:
        request = TokenRequest(session.api_key, session.api_secret)
    except AuthError as exc:
        return _credentials_missing(exc)
    logger.debug("requesting access token from %s", _token_uri(session))
    response = session.requester.execute(
        _token_uri(session), HttpVerb.POST, request, False, session, AuthToken.from_dict
    )
    response = _checked(response)
    _log_outcome(response)
    return response


async def async_fetch_token(session: "Session") -> ShippingApiResponse[AuthToken]:
    """Awaitable variant of `fetch_token` using the session's async requester."""
    try:
        request = TokenRequest(session.api_key, session.api_secret)
    except AuthError as exc:
        return _credentials_missing(exc)
    logger.debug("requesting access token from %s", _token_uri(session))
    response = await session.async_requester.execute(
        _token_uri(session), HttpVerb.POST, request, False, session, AuthToken.from_dict
    )
    response = _checked(response)
    _log_outcome(response)
    return response
