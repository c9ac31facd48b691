from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List


class Carrier(str, Enum):
    USPS = "USPS"


class AddressStatus(str, Enum):
    VALIDATED_CHANGED = "VALIDATED_CHANGED"
    VALIDATED_AND_NOT_CHANGED = "VALIDATED_AND_NOT_CHANGED"
    NOT_CHANGED = "NOT_CHANGED"


class PackageLocation(str, Enum):
    FRONT_DOOR = "Front Door"
    BACK_DOOR = "Back Door"
    SIDE_DOOR = "Side Door"
    KNOCK_ON_DOOR = "Knock on Door/Ring Bell"
    MAIL_ROOM = "Mail Room"
    OFFICE = "Office"
    RECEPTION = "Reception"
    IN_MAILBOX = "In/At Mailbox"
    OTHER = "Other"


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None and v != []}


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


@dataclass
class Address:
    address_lines: List[str] = field(default_factory=list)
    city_town: str | None = None
    state_province: str | None = None
    postal_code: str | None = None
    country_code: str | None = None
    company: str | None = None
    name: str | None = None
    phone: str | None = None
    email: str | None = None
    residential: bool | None = None
    status: AddressStatus | None = None
    delivery_point: str | None = None
    carrier_route: str | None = None

    def add_address_line(self, line: str) -> None:
        self.address_lines.append(line)

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "addressLines": list(self.address_lines),
                "cityTown": self.city_town,
                "stateProvince": self.state_province,
                "postalCode": self.postal_code,
                "countryCode": self.country_code,
                "company": self.company,
                "name": self.name,
                "phone": self.phone,
                "email": self.email,
                "residential": self.residential,
                "status": _enum_value(self.status),
                "deliveryPoint": self.delivery_point,
                "carrierRoute": self.carrier_route,
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Address":
        status = data.get("status")
        return cls(
            address_lines=list(data.get("addressLines") or []),
            city_town=data.get("cityTown"),
            state_province=data.get("stateProvince"),
            postal_code=data.get("postalCode"),
            country_code=data.get("countryCode"),
            company=data.get("company"),
            name=data.get("name"),
            phone=data.get("phone"),
            email=data.get("email"),
            residential=data.get("residential"),
            status=AddressStatus(status) if status else None,
            delivery_point=data.get("deliveryPoint"),
            carrier_route=data.get("carrierRoute"),
        )


@dataclass
class AddressSuggestions:
    """Verified address plus up to 20 unsorted, unvalidated suggestions."""

    address: Address
    suggestion_type: str | None = None
    suggestions: List[Address] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AddressSuggestions":
        block = data.get("suggestions") or {}
        return cls(
            address=Address.from_dict(data["address"]),
            suggestion_type=block.get("suggestionType"),
            suggestions=[Address.from_dict(a) for a in block.get("addresses") or []],
        )


@dataclass
class PickupCount:
    service_id: str
    count: int
    total_weight: float | None = None
    weight_unit: str = "OZ"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"serviceId": self.service_id, "count": self.count}
        if self.total_weight is not None:
            out["totalWeight"] = {"weight": self.total_weight, "unitOfMeasurement": self.weight_unit}
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PickupCount":
        weight = data.get("totalWeight") or {}
        return cls(
            service_id=data["serviceId"],
            count=int(data["count"]),
            total_weight=weight.get("weight"),
            weight_unit=weight.get("unitOfMeasurement", "OZ"),
        )


@dataclass
class Pickup:
    """USPS package pickup from a residential or commercial location."""

    pickup_address: Address | None = None
    carrier: Carrier = Carrier.USPS
    pickup_summary: List[PickupCount] = field(default_factory=list)
    reference: str | None = None
    package_location: PackageLocation | None = None
    special_instructions: str | None = None
    transaction_id: str | None = None
    # populated by the service
    pickup_date: date | None = None
    pickup_confirmation_number: str | None = None
    pickup_id: str | None = None

    def add_pickup_count(self, count: PickupCount) -> None:
        self.pickup_summary.append(count)

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "pickupAddress": self.pickup_address.to_dict() if self.pickup_address else None,
                "carrier": _enum_value(self.carrier),
                "pickupSummary": [p.to_dict() for p in self.pickup_summary],
                "reference": self.reference,
                "packageLocation": _enum_value(self.package_location),
                "specialInstructions": self.special_instructions,
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pickup":
        address = data.get("pickupAddress")
        location = data.get("packageLocation")
        pickup_date = data.get("pickupDate")
        return cls(
            pickup_address=Address.from_dict(address) if address else None,
            carrier=Carrier(data.get("carrier") or "USPS"),
            pickup_summary=[PickupCount.from_dict(p) for p in data.get("pickupSummary") or []],
            reference=data.get("reference"),
            package_location=PackageLocation(location) if location else None,
            special_instructions=data.get("specialInstructions"),
            pickup_date=datetime.strptime(pickup_date, "%Y-%m-%d").date() if pickup_date else None,
            pickup_confirmation_number=data.get("pickupConfirmationNumber"),
            pickup_id=data.get("pickupId"),
        )
