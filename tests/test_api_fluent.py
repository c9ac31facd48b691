import json
from datetime import date

import pytest

from shippingapi import (
    Address,
    AddressFluent,
    AddressStatus,
    AuthToken,
    BadRequestError,
    ErrorDetail,
    PackageLocation,
    PickupFluent,
    Session,
    ShippingAPIError,
    ShippingApiResponse,
    cancel_pickup,
    verify_address,
)


VERIFIED = {
    "addressLines": ["27 Waterview Dr"],
    "cityTown": "Shelton",
    "stateProvince": "CT",
    "postalCode": "06484-4361",
    "countryCode": "US",
    "residential": False,
    "status": "VALIDATED_CHANGED",
}


class _PayloadRequester:
    """Feeds canned JSON payloads through the response_type like a real transport."""

    def __init__(self, payload, status=200, errors=None):
        self.payload = payload
        self.status = status
        self.errors = errors or []
        self.calls = []

    def execute(self, uri, verb, request, delete_body, session, response_type=None):
        self.calls.append(
            {
                "uri": uri,
                "verb": verb.value,
                "body": json.loads(json.dumps(request.body())),
                "query": request.query(),
                "headers": request.headers(),
                "delete_body": delete_body,
            }
        )
        if self.errors:
            return ShippingApiResponse(errors=list(self.errors), http_status=self.status)
        value = response_type(self.payload) if response_type else self.payload
        return ShippingApiResponse(api_response=value, http_status=self.status)


def _session(requester, **kwargs):
    return Session(
        base_url="https://mock.api",
        api_key="key",
        api_secret="secret",
        auth_token=AuthToken("tok"),
        requester=requester,
        **kwargs,
    )


def _fluent():
    return (
        AddressFluent.create()
        .address_lines("27 Waterview Drive")
        .city_town("Shelton")
        .state_province("CT")
        .postal_code("06484")
        .country_code("US")
        .person("Paul Wright", "203-555-1213", "john.publica@pb.com")
        .residential(False)
    )


def test_fluent_setters_fill_underlying_address():
    addr = _fluent().company("Pitney Bowes").address_lines("Suite 1", "Building 2").address

    assert addr.address_lines == ["27 Waterview Drive", "Suite 1", "Building 2"]
    assert addr.name == "Paul Wright"
    assert addr.email == "john.publica@pb.com"
    assert addr.to_dict()["cityTown"] == "Shelton"
    assert "status" not in addr.to_dict()


def test_verify_address_posts_to_verify_endpoint():
    requester = _PayloadRequester(VERIFIED)
    session = _session(requester, minimal_address_validation=True)

    response = verify_address(_fluent().address, session)

    call = requester.calls[0]
    assert call["uri"] == "https://mock.api/shippingservices/v1/addresses/verify"
    assert call["verb"] == "POST"
    assert call["query"] == {"minimalAddressValidation": "true"}
    assert call["body"]["postalCode"] == "06484"
    assert response.api_response.status is AddressStatus.VALIDATED_CHANGED
    assert session.counters_for(call["uri"]).call_count == 1


def test_fluent_verify_replaces_address():
    fluent = _fluent()
    original = fluent.address

    fluent.verify(_session(_PayloadRequester(VERIFIED)))

    assert fluent.address is not original
    assert fluent.address.postal_code == "06484-4361"


def test_fluent_verify_raises_on_failure_even_without_throw_mode():
    requester = _PayloadRequester(None, status=400, errors=[ErrorDetail("1020010", "Invalid postal code")])

    with pytest.raises(ShippingAPIError) as excinfo:
        _fluent().verify(_session(requester))

    assert excinfo.value.errors == [ErrorDetail("1020010", "Invalid postal code")]


def test_verify_suggest_returns_one_builder_per_suggestion():
    payload = {
        "address": VERIFIED,
        "suggestions": {
            "suggestionType": "address",
            "addresses": [
                dict(VERIFIED, addressLines=["1-99 Waterview Dr"]),
                dict(VERIFIED, addressLines=["100-199 Waterview Dr"]),
            ],
        },
    }
    requester = _PayloadRequester(payload)
    fluent = _fluent()

    suggestions = fluent.verify_suggest(_session(requester))

    assert requester.calls[0]["uri"].endswith("/addresses/verify-suggest")
    assert requester.calls[0]["query"] == {"returnSuggestions": "true"}
    assert [s.address.address_lines[0] for s in suggestions] == ["1-99 Waterview Dr", "100-199 Waterview Dr"]
    assert all(isinstance(s, AddressFluent) for s in suggestions)
    assert fluent.address.city_town == "Shelton"
    # eager list; iterating twice yields the same builders
    assert list(suggestions) == list(suggestions)


def test_verify_suggest_without_suggestions_is_empty():
    requester = _PayloadRequester({"address": VERIFIED})
    assert _fluent().verify_suggest(_session(requester)) == []


def test_schedule_pickup_via_fluent_builder():
    response_payload = {
        "pickupAddress": VERIFIED,
        "carrier": "USPS",
        "pickupSummary": [{"serviceId": "PM", "count": 2, "totalWeight": {"weight": 20, "unitOfMeasurement": "OZ"}}],
        "packageLocation": "Office",
        "pickupDate": "2026-10-20",
        "pickupConfirmationNumber": "WTC123",
        "pickupId": "PU-42",
    }
    requester = _PayloadRequester(response_payload)

    builder = (
        PickupFluent.create()
        .pickup_address(_fluent())
        .add_pickup_count("PM", 2, 20)
        .package_location(PackageLocation.OFFICE)
        .reference("order-9")
        .transaction_id("tx-1")
        .schedule(_session(requester))
    )

    call = requester.calls[0]
    assert call["uri"] == "https://mock.api/shippingservices/v1/pickups/schedule"
    assert call["headers"]["X-PB-TransactionId"] == "tx-1"
    assert call["body"]["pickupSummary"] == [
        {"serviceId": "PM", "count": 2, "totalWeight": {"weight": 20, "unitOfMeasurement": "OZ"}}
    ]
    assert call["body"]["packageLocation"] == "Office"
    assert builder.pickup.pickup_id == "PU-42"
    assert builder.pickup.pickup_date == date(2026, 10, 20)


def test_schedule_pickup_requires_address():
    with pytest.raises(BadRequestError):
        PickupFluent.create().schedule(_session(_PayloadRequester({})))


def test_cancel_pickup_sends_delete_with_body():
    requester = _PayloadRequester({"status": "Success"})

    response = cancel_pickup("PU-42", _session(requester))

    call = requester.calls[0]
    assert call["verb"] == "DELETE"
    assert call["delete_body"] is True
    assert call["uri"] == "https://mock.api/shippingservices/v1/pickups/PU-42"
    assert call["body"] == {"pickupId": "PU-42"}
    assert response.api_response == {"status": "Success"}


def test_address_dict_round_trip():
    addr = Address.from_dict(VERIFIED)
    assert Address.from_dict(addr.to_dict()) == addr
