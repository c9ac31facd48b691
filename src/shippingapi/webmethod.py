"""Request dispatch: token refresh, bounded retry and outcome reporting.

Every resource call funnels through `dispatch` (or `async_dispatch`). The core
never raises for remote failures; it returns a `DispatchResult` whose response
is either successful or carries the error entries and outcome code. The public
verb helpers (`get`, `post`, `put`, `delete`, `delete_with_body` and their
`async_` twins) resolve the default session and apply the session's
raise-on-failure policy.

Retry policy
- at most `session.retries` attempts, token refreshes included
- only throttling error codes are retried; everything else is terminal
- no new attempt once `session.timeout_ms` has elapsed (status 408 plus a
  "Client Timeout" entry)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from .auth import AuthToken
from .config import DEFAULT_RETRYABLE_ERROR_CODES
from .errors import DeserializationError, ShippingAPIError
from .response import (
    DESERIALIZATION_ERROR,
    EmptyRequest,
    ErrorDetail,
    HttpVerb,
    ShippingApiRequest,
    ShippingApiResponse,
)
from .session import Session, default_session

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class DispatchResult(Generic[T]):
    response: ShippingApiResponse[T]
    origin: Optional[Exception] = None


def is_retryable(
    status: Optional[int],
    errors: Iterable[ErrorDetail],
    codes: Iterable[str] = DEFAULT_RETRYABLE_ERROR_CODES,
) -> bool:
    """True when the remote service signalled throttling for this attempt."""
    codes = frozenset(codes)
    return any(e.error_code in codes for e in errors)


def _budget_exceeded(session: Session, start: float) -> bool:
    return (session.clock() - start) * 1000.0 > session.timeout_ms


def _mark_client_timeout(response: ShippingApiResponse, uri: str) -> None:
    logger.warning("client timeout calling %s", uri)
    response.http_status = HTTPStatus.REQUEST_TIMEOUT.value
    response.errors.append(ErrorDetail.client_timeout())


def _issued_token(token_response: ShippingApiResponse) -> Optional[AuthToken]:
    token = token_response.api_response
    if token_response.success and isinstance(token, AuthToken) and token.access_token:
        return token
    if token_response.success:
        # a 2xx without a token is still a refresh failure
        token_response.errors.append(ErrorDetail("invalid_token_response", "token provider returned no access token"))
    return None


def _stop_after_token_failure(
    session: Session,
    token_response: ShippingApiResponse,
    response: ShippingApiResponse,
    retries: int,
    start: float,
    uri: str,
) -> bool:
    session.auth_token = None
    if retries == 1:
        response.errors = list(token_response.errors)
        response.http_status = token_response.http_status
        return True
    if _budget_exceeded(session, start):
        _mark_client_timeout(response, uri)
        return True
    logger.debug("token refresh failed (status=%s), %d attempts left", token_response.http_status, retries - 1)
    return False


def _stop_after_attempt(session: Session, response: ShippingApiResponse, start: float, uri: str) -> bool:
    if response.success:
        return True
    if response.http_status == HTTPStatus.UNAUTHORIZED:
        # stale token; the next call fetches a fresh one
        session.auth_token = None
    if not is_retryable(response.http_status, response.errors, session.retryable_error_codes):
        return True
    if _budget_exceeded(session, start):
        _mark_client_timeout(response, uri)
        return True
    logger.warning("throttled by %s, retrying", uri)
    return False


def _deserialization_failure(response: ShippingApiResponse, exc: DeserializationError, uri: str) -> None:
    logger.warning("could not deserialize response from %s: %s", uri, exc)
    response.http_status = HTTPStatus.INTERNAL_SERVER_ERROR.value
    response.errors.append(ErrorDetail(DESERIALIZATION_ERROR, str(exc)))


def _finish(session: Session, uri: str, response: ShippingApiResponse, start: float) -> None:
    response.request_time = max(0.0, session.clock() - start)
    session.update_counters(uri, response.success, response.request_time)


def dispatch(
    uri: str,
    verb: HttpVerb,
    request: ShippingApiRequest,
    session: Session,
    *,
    delete_body: bool = False,
    response_type: Optional[Callable[[Any], T]] = None,
) -> DispatchResult[T]:
    """Run one logical call against `uri` and return its outcome without raising."""
    response: ShippingApiResponse[T] = ShippingApiResponse()
    origin: Optional[Exception] = None
    start = session.clock()
    try:
        for retries in range(session.retries, 0, -1):
            token = session.valid_token()
            if token is None:
                token_response = session.token_provider(session)
                token = _issued_token(token_response)
                if token is None:
                    if _stop_after_token_failure(session, token_response, response, retries, start, uri):
                        break
                    continue
                session.auth_token = token
            request.authorization = token.access_token
            logger.debug("%s %s (attempts left: %d)", verb.value, uri, retries)
            response = session.requester.execute(uri, verb, request, delete_body, session, response_type)
            if _stop_after_attempt(session, response, start, uri):
                break
    except DeserializationError as exc:
        origin = exc
        _deserialization_failure(response, exc, uri)
    finally:
        request.authorization = None
        _finish(session, uri, response, start)
    return DispatchResult(response, origin)


async def async_dispatch(
    uri: str,
    verb: HttpVerb,
    request: ShippingApiRequest,
    session: Session,
    *,
    delete_body: bool = False,
    response_type: Optional[Callable[[Any], T]] = None,
) -> DispatchResult[T]:
    """Awaitable twin of `dispatch`; suspends only on token fetch and transport."""
    response: ShippingApiResponse[T] = ShippingApiResponse()
    origin: Optional[Exception] = None
    start = session.clock()
    try:
        for retries in range(session.retries, 0, -1):
            token = session.valid_token()
            if token is None:
                token_response = await session.async_token_provider(session)
                token = _issued_token(token_response)
                if token is None:
                    if _stop_after_token_failure(session, token_response, response, retries, start, uri):
                        break
                    continue
                session.auth_token = token
            request.authorization = token.access_token
            logger.debug("%s %s (attempts left: %d)", verb.value, uri, retries)
            response = await session.async_requester.execute(uri, verb, request, delete_body, session, response_type)
            if _stop_after_attempt(session, response, start, uri):
                break
    except DeserializationError as exc:
        origin = exc
        _deserialization_failure(response, exc, uri)
    finally:
        request.authorization = None
        _finish(session, uri, response, start)
    return DispatchResult(response, origin)


def _apply_policy(result: DispatchResult[T], session: Session) -> ShippingApiResponse[T]:
    if session.throw_exceptions and not result.response.success:
        raise ShippingAPIError(result.response) from result.origin
    return result.response


def _call(uri, verb, request, response_type, session, delete_body=False):
    session = session or default_session()
    result = dispatch(
        uri,
        verb,
        request if request is not None else EmptyRequest(),
        session,
        delete_body=delete_body,
        response_type=response_type,
    )
    return _apply_policy(result, session)


async def _async_call(uri, verb, request, response_type, session, delete_body=False):
    session = session or default_session()
    result = await async_dispatch(
        uri,
        verb,
        request if request is not None else EmptyRequest(),
        session,
        delete_body=delete_body,
        response_type=response_type,
    )
    return _apply_policy(result, session)


def get(uri: str, request: ShippingApiRequest | None = None, response_type=None, session: Session | None = None):
    return _call(uri, HttpVerb.GET, request, response_type, session)


def post(uri: str, request: ShippingApiRequest, response_type=None, session: Session | None = None):
    return _call(uri, HttpVerb.POST, request, response_type, session)


def put(uri: str, request: ShippingApiRequest, response_type=None, session: Session | None = None):
    return _call(uri, HttpVerb.PUT, request, response_type, session)


def delete(uri: str, request: ShippingApiRequest | None = None, response_type=None, session: Session | None = None):
    return _call(uri, HttpVerb.DELETE, request, response_type, session)


def delete_with_body(uri: str, request: ShippingApiRequest, response_type=None, session: Session | None = None):
    """DELETE that still serializes and sends the request body."""
    return _call(uri, HttpVerb.DELETE, request, response_type, session, delete_body=True)


async def async_get(uri, request=None, response_type=None, session=None):
    return await _async_call(uri, HttpVerb.GET, request, response_type, session)


async def async_post(uri, request, response_type=None, session=None):
    return await _async_call(uri, HttpVerb.POST, request, response_type, session)


async def async_put(uri, request, response_type=None, session=None):
    return await _async_call(uri, HttpVerb.PUT, request, response_type, session)


async def async_delete(uri, request=None, response_type=None, session=None):
    return await _async_call(uri, HttpVerb.DELETE, request, response_type, session)


async def async_delete_with_body(uri, request, response_type=None, session=None):
    return await _async_call(uri, HttpVerb.DELETE, request, response_type, session, delete_body=True)
