import asyncio
import base64

import pytest

from shippingapi import AuthToken, Session, ShippingApiResponse, async_fetch_token, fetch_token
from shippingapi.auth import TokenRequest
from shippingapi.errors import AuthError


class _RecordingRequester:
    def __init__(self, response):
        self.response = response
        self.calls = []

    def execute(self, uri, verb, request, delete_body, session, response_type=None):
        self.calls.append((uri, verb, request, delete_body, response_type))
        return self.response


class _AsyncRecordingRequester(_RecordingRequester):
    async def execute(self, uri, verb, request, delete_body, session, response_type=None):
        return super().execute(uri, verb, request, delete_body, session, response_type)


def test_token_from_oauth_payload():
    token = AuthToken.from_dict(
        {
            "access_token": "abc",
            "tokenType": "BearerToken",
            "issuedAt": "1700000000000",
            "expiresIn": "35999",
            "clientID": "client",
            "org": "1234",
        }
    )
    assert token.access_token == "abc"
    assert token.issued_at == pytest.approx(1_700_000_000.0)
    assert token.expires_at == pytest.approx(1_700_035_999.0)
    assert token.client_id == "client"
    assert not token.is_expired(now=1_700_000_100.0)
    assert token.is_expired(now=1_700_035_990.0)


def test_token_without_expiry_never_expires():
    assert not AuthToken("abc").is_expired(now=10**12)


def test_token_payload_without_access_token_is_rejected():
    with pytest.raises(ValueError):
        AuthToken.from_dict({"tokenType": "BearerToken"})


def test_token_request_uses_basic_auth_and_form_body():
    request = TokenRequest("key", "secret")
    headers = request.headers()
    assert headers["Authorization"] == "Basic " + base64.b64encode(b"key:secret").decode("ascii")
    assert headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.body() == {"grant_type": "client_credentials"}


def test_token_request_requires_credentials():
    with pytest.raises(AuthError):
        TokenRequest("key", None)


def test_fetch_token_posts_to_oauth_endpoint():
    ok = ShippingApiResponse(api_response=AuthToken("abc"), http_status=200)
    requester = _RecordingRequester(ok)
    session = Session(base_url="https://mock.api/", api_key="key", api_secret="secret", requester=requester)

    response = fetch_token(session)

    assert response is ok
    uri, verb, request, delete_body, response_type = requester.calls[0]
    assert uri == "https://mock.api/oauth/token"
    assert verb.value == "POST"
    assert isinstance(request, TokenRequest)
    assert delete_body is False
    assert response_type == AuthToken.from_dict


def test_fetch_token_without_credentials_skips_transport():
    requester = _RecordingRequester(None)
    session = Session(api_key=None, api_secret=None, requester=requester)

    response = fetch_token(session)

    assert requester.calls == []
    assert response.http_status == 401
    assert response.errors[0].error_code == "credentials_missing"
    assert not response.success


def test_zero_expires_in_is_kept_and_expired():
    token = AuthToken.from_dict({"access_token": "abc", "issuedAt": 1_700_000_000, "expiresIn": 0, "expires_in": 3600})

    assert token.expires_in == 0.0
    assert token.is_expired(now=1_700_000_000.0)


def test_fetch_token_empty_success_body_is_a_failure():
    requester = _RecordingRequester(ShippingApiResponse(http_status=200))
    session = Session(api_key="key", api_secret="secret", requester=requester)

    response = fetch_token(session)

    assert not response.success
    assert response.http_status == 200
    assert [e.error_code for e in response.errors] == ["invalid_token_response"]


def test_async_fetch_token_empty_success_body_is_a_failure():
    requester = _AsyncRecordingRequester(ShippingApiResponse(http_status=204))
    session = Session(api_key="key", api_secret="secret", async_requester=requester)

    response = asyncio.run(async_fetch_token(session))

    assert not response.success
    assert response.errors[0].error_code == "invalid_token_response"


def test_async_fetch_token_uses_async_requester():
    ok = ShippingApiResponse(api_response=AuthToken("abc"), http_status=200)
    requester = _AsyncRecordingRequester(ok)
    session = Session(api_key="key", api_secret="secret", async_requester=requester)

    response = asyncio.run(async_fetch_token(session))

    assert response.api_response.access_token == "abc"
    assert len(requester.calls) == 1
