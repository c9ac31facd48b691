"""Resource calls for address verification and USPS pickups.

Each call builds a typed request and funnels it through the dispatcher, so
token refresh, retries and the raise-on-failure policy apply uniformly.
"""

from __future__ import annotations

from typing import Any, Dict

from . import webmethod
from .errors import BadRequestError
from .model import Address, AddressSuggestions, Pickup
from .response import ShippingApiRequest, ShippingApiResponse
from .session import Session, default_session

VERIFY_ADDRESS_PATH = "/shippingservices/v1/addresses/verify"
VERIFY_SUGGEST_PATH = "/shippingservices/v1/addresses/verify-suggest"
SCHEDULE_PICKUP_PATH = "/shippingservices/v1/pickups/schedule"
CANCEL_PICKUP_PATH = "/shippingservices/v1/pickups/{pickup_id}"


def _flag(value: bool) -> str:
    return "true" if value else "false"


class VerifyAddressRequest(ShippingApiRequest):
    def __init__(self, address: Address, minimal_validation: bool = False) -> None:
        super().__init__()
        self.address = address
        self.minimal_validation = minimal_validation

    def body(self) -> Dict[str, Any]:
        return self.address.to_dict()

    def query(self) -> Dict[str, Any]:
        return {"minimalAddressValidation": _flag(self.minimal_validation)}


class VerifySuggestRequest(VerifyAddressRequest):
    def query(self) -> Dict[str, Any]:
        return {"returnSuggestions": "true"}


class PickupRequest(ShippingApiRequest):
    def __init__(self, pickup: Pickup) -> None:
        super().__init__()
        self.pickup = pickup

    def body(self) -> Dict[str, Any]:
        return self.pickup.to_dict()

    def headers(self) -> Dict[str, str]:
        headers = super().headers()
        if self.pickup.transaction_id:
            headers["X-PB-TransactionId"] = self.pickup.transaction_id
        return headers


class CancelPickupRequest(ShippingApiRequest):
    def __init__(self, pickup_id: str) -> None:
        super().__init__()
        self.pickup_id = pickup_id

    def body(self) -> Dict[str, Any]:
        return {"pickupId": self.pickup_id}


def verify_address(address: Address, session: Session | None = None) -> ShippingApiResponse[Address]:
    """Validate and cleanse a U.S. address; the response carries the corrected address."""
    session = session or default_session()
    request = VerifyAddressRequest(address, session.minimal_address_validation)
    return webmethod.post(session.endpoint(VERIFY_ADDRESS_PATH), request, Address.from_dict, session)


def verify_suggest_address(address: Address, session: Session | None = None) -> ShippingApiResponse[AddressSuggestions]:
    """Ask for suggested addresses when verification of `address` fails.

    Suggestions are not validated and not sorted by best match.
    """
    session = session or default_session()
    request = VerifySuggestRequest(address, session.minimal_address_validation)
    return webmethod.post(session.endpoint(VERIFY_SUGGEST_PATH), request, AddressSuggestions.from_dict, session)


def schedule_pickup(pickup: Pickup, session: Session | None = None) -> ShippingApiResponse[Pickup]:
    if pickup.pickup_address is None:
        raise BadRequestError("pickup_address is required to schedule a pickup")
    session = session or default_session()
    return webmethod.post(session.endpoint(SCHEDULE_PICKUP_PATH), PickupRequest(pickup), Pickup.from_dict, session)


def cancel_pickup(pickup_id: str, session: Session | None = None) -> ShippingApiResponse[Dict[str, Any]]:
    if not pickup_id:
        raise BadRequestError("pickup_id is required to cancel a pickup")
    session = session or default_session()
    uri = session.endpoint(CANCEL_PICKUP_PATH.format(pickup_id=pickup_id))
    return webmethod.delete_with_body(uri, CancelPickupRequest(pickup_id), None, session)
