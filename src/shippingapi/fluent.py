"""Chained builders over the address and pickup records.

Each builder owns exactly one underlying record and every setter returns the
builder itself, e.g.::

    addr = (
        AddressFluent.create()
        .address_lines("27 Waterview Dr")
        .city_town("Shelton")
        .state_province("CT")
        .postal_code("06484")
        .country_code("US")
        .verify(session)
        .address
    )
"""

from __future__ import annotations

from typing import List

from . import api
from .errors import ShippingAPIError
from .model import Address, AddressStatus, Carrier, PackageLocation, Pickup, PickupCount
from .session import Session


class AddressFluent:
    def __init__(self, address: Address | None = None) -> None:
        self.address = address if address is not None else Address()

    @classmethod
    def create(cls, address: Address | None = None) -> "AddressFluent":
        return cls(address)

    def address_lines(self, a1: str, a2: str | None = None, a3: str | None = None) -> "AddressFluent":
        """Up to three lines; for USPS domestic destinations put the street address last."""
        self.address.add_address_line(a1)
        if a2 is not None:
            self.address.add_address_line(a2)
        if a3 is not None:
            self.address.add_address_line(a3)
        return self

    def city_town(self, value: str) -> "AddressFluent":
        self.address.city_town = value
        return self

    def state_province(self, value: str) -> "AddressFluent":
        self.address.state_province = value
        return self

    def postal_code(self, value: str) -> "AddressFluent":
        self.address.postal_code = value
        return self

    def country_code(self, value: str) -> "AddressFluent":
        self.address.country_code = value
        return self

    def company(self, value: str) -> "AddressFluent":
        self.address.company = value
        return self

    def name(self, value: str | None) -> "AddressFluent":
        self.address.name = value
        return self

    def phone(self, value: str | None) -> "AddressFluent":
        self.address.phone = value
        return self

    def email(self, value: str | None) -> "AddressFluent":
        self.address.email = value
        return self

    def residential(self, value: bool) -> "AddressFluent":
        self.address.residential = value
        return self

    def status(self, value: AddressStatus) -> "AddressFluent":
        self.address.status = value
        return self

    def person(self, name: str, phone: str | None = None, email: str | None = None) -> "AddressFluent":
        return self.name(name).phone(phone).email(email)

    def verify(self, session: Session | None = None) -> "AddressFluent":
        """Replace the address with its validated form; raise ShippingAPIError on failure."""
        response = api.verify_address(self.address, session)
        if not response.success:
            raise ShippingAPIError(response)
        self.address = response.api_response
        return self

    def verify_suggest(self, session: Session | None = None) -> List["AddressFluent"]:
        """Return one builder per suggested address.

        The verified address replaces the current one. An empty list means the
        service had no suggestions.
        """
        response = api.verify_suggest_address(self.address, session)
        if not response.success:
            raise ShippingAPIError(response)
        self.address = response.api_response.address
        return [AddressFluent(a) for a in response.api_response.suggestions]


class PickupFluent:
    def __init__(self, pickup: Pickup | None = None) -> None:
        self.pickup = pickup if pickup is not None else Pickup()

    @classmethod
    def create(cls, pickup: Pickup | None = None) -> "PickupFluent":
        return cls(pickup)

    def pickup_address(self, address: Address | AddressFluent) -> "PickupFluent":
        self.pickup.pickup_address = address.address if isinstance(address, AddressFluent) else address
        return self

    def carrier(self, value: Carrier) -> "PickupFluent":
        self.pickup.carrier = value
        return self

    def add_pickup_count(self, service_id: str, count: int, total_weight: float | None = None) -> "PickupFluent":
        self.pickup.add_pickup_count(PickupCount(service_id, count, total_weight))
        return self

    def reference(self, value: str) -> "PickupFluent":
        self.pickup.reference = value
        return self

    def package_location(self, value: PackageLocation) -> "PickupFluent":
        self.pickup.package_location = value
        return self

    def special_instructions(self, value: str) -> "PickupFluent":
        """Required when the package location is Other."""
        self.pickup.special_instructions = value
        return self

    def transaction_id(self, value: str) -> "PickupFluent":
        self.pickup.transaction_id = value
        return self

    def schedule(self, session: Session | None = None) -> "PickupFluent":
        response = api.schedule_pickup(self.pickup, session)
        if not response.success:
            raise ShippingAPIError(response)
        self.pickup = response.api_response
        return self
