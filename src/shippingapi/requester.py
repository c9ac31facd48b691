"""HTTP transports performing one physical exchange per call.

Requesters never retry and never raise for remote failures: every outcome is
returned as a `ShippingApiResponse`. The one exception is a success payload
that cannot be converted to the expected type, which raises
`DeserializationError` so the dispatcher can report it as an internal error.

- RequestsRequester: blocking transport built on `requests`
- HttpxRequester: awaitable transport built on `httpx.AsyncClient`
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Protocol, Tuple

import httpx
import requests
from requests.structures import CaseInsensitiveDict

from .errors import DeserializationError
from .response import ErrorDetail, HttpVerb, ShippingApiRequest, ShippingApiResponse

if TYPE_CHECKING:  # pragma: no cover
    from .session import Session

logger = logging.getLogger(__name__)

ResponseType = Optional[Callable[[Any], Any]]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Requester(Protocol):
    def execute(
        self,
        uri: str,
        verb: HttpVerb,
        request: ShippingApiRequest,
        delete_body: bool,
        session: "Session",
        response_type: ResponseType = None,
    ) -> ShippingApiResponse: ...


class AsyncRequester(Protocol):
    async def execute(
        self,
        uri: str,
        verb: HttpVerb,
        request: ShippingApiRequest,
        delete_body: bool,
        session: "Session",
        response_type: ResponseType = None,
    ) -> ShippingApiResponse: ...


def _sends_body(verb: HttpVerb, delete_body: bool) -> bool:
    if verb in (HttpVerb.POST, HttpVerb.PUT):
        return True
    return verb == HttpVerb.DELETE and delete_body


def _prepare_call(
    verb: HttpVerb, request: ShippingApiRequest, delete_body: bool
) -> Tuple[Dict[str, str], Dict[str, Any], Any, bool]:
    """Return headers, query params, encoded body and whether the body is form data."""
    headers = request.headers()
    params = {k: v for k, v in request.query().items() if v is not None}
    if not _sends_body(verb, delete_body):
        headers.pop("Content-Type", None)
        return headers, params, None, False
    body = request.body()
    if request.content_type == FORM_CONTENT_TYPE:
        return headers, params, body or {}, True
    return headers, params, json.dumps(body if body is not None else {}), False


def _parse_errors(status: int, payload: Any, text: str) -> List[ErrorDetail]:
    entries: list = []
    if isinstance(payload, list):
        entries = payload
    elif isinstance(payload, dict):
        nested = payload.get("errors")
        if isinstance(nested, list):
            entries = nested
        elif payload.get("errorCode") or payload.get("error"):
            entries = [
                {
                    "errorCode": payload.get("errorCode") or payload.get("error"),
                    "message": payload.get("message") or payload.get("error_description") or "",
                }
            ]
    errors = [ErrorDetail.from_dict(e) for e in entries if isinstance(e, dict)]
    if not errors:
        errors.append(ErrorDetail(str(status), text or f"HTTP {status}"))
    return errors


def _decode_json(text: str) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _build_response(
    status: int, headers: Mapping[str, str], text: str, response_type: ResponseType
) -> ShippingApiResponse:
    response: ShippingApiResponse = ShippingApiResponse(http_status=status, headers=CaseInsensitiveDict(headers))
    if not 200 <= status < 300:
        response.errors = _parse_errors(status, _decode_json(text), text)
        return response
    if not text:
        return response
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise DeserializationError(f"invalid JSON in response body: {exc}", payload=text) from exc
    if response_type is None:
        response.api_response = payload
        return response
    try:
        response.api_response = response_type(payload)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        name = getattr(response_type, "__qualname__", repr(response_type))
        raise DeserializationError(f"cannot convert response to {name}: {exc}", payload=payload) from exc
    return response


def _network_failure(status: int, code: str, exc: Exception, verb: HttpVerb, url: str) -> ShippingApiResponse:
    logger.warning("%s %s failed: %s", verb.value, url, exc)
    return ShippingApiResponse(errors=[ErrorDetail(code, str(exc))], http_status=status)


class RequestsRequester:
    """Blocking transport backed by `requests`."""

    def execute(
        self,
        uri: str,
        verb: HttpVerb,
        request: ShippingApiRequest,
        delete_body: bool,
        session: "Session",
        response_type: ResponseType = None,
    ) -> ShippingApiResponse:
        headers, params, body, _ = _prepare_call(verb, request, delete_body)
        logger.debug("%s %s", verb.value, uri)
        try:
            resp = requests.request(
                verb.value,
                uri,
                headers=headers,
                params=params or None,
                data=body,
                timeout=session.http_timeout,
            )
        except requests.Timeout as e:
            return _network_failure(408, "Transport Timeout", e, verb, uri)
        except requests.RequestException as e:
            return _network_failure(503, "Transport Error", e, verb, uri)
        return _build_response(resp.status_code, resp.headers, resp.text, response_type)


class HttpxRequester:
    """Asynchronous transport using httpx.AsyncClient."""

    async def execute(
        self,
        uri: str,
        verb: HttpVerb,
        request: ShippingApiRequest,
        delete_body: bool,
        session: "Session",
        response_type: ResponseType = None,
    ) -> ShippingApiResponse:
        headers, params, body, is_form = _prepare_call(verb, request, delete_body)
        kwargs: Dict[str, Any] = {"headers": headers}
        if params:
            kwargs["params"] = params
        if body is not None:
            kwargs["data" if is_form else "content"] = body
        logger.debug("%s %s", verb.value, uri)
        try:
            async with httpx.AsyncClient(timeout=session.http_timeout) as client:
                resp = await client.request(verb.value, uri, **kwargs)
        except httpx.TimeoutException as e:
            return _network_failure(408, "Transport Timeout", e, verb, uri)
        except httpx.HTTPError as e:
            return _network_failure(503, "Transport Error", e, verb, uri)
        return _build_response(resp.status_code, resp.headers, resp.text, response_type)
