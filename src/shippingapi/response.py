"""Request and response envelopes shared by the dispatcher and transports.

ShippingApiResponse
- api_response: typed payload (success only)
- errors: ordered list of ErrorDetail; duplicates are allowed
- http_status: outcome code with HTTP semantics (2xx success, 408 client timeout, 500 internal)
- request_time: seconds spent on the whole call, retries included
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

CLIENT_TIMEOUT = "Client Timeout"
DESERIALIZATION_ERROR = "Deserialization error"


class HttpVerb(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


@dataclass(eq=True)
class ErrorDetail:
    error_code: str
    message: str = ""
    additional_info: str | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorDetail":
        code = data.get("errorCode") or data.get("code") or ""
        message = data.get("message") or data.get("errorDescription") or ""
        return cls(error_code=str(code), message=str(message), additional_info=data.get("additionalInfo"))

    @classmethod
    def client_timeout(cls) -> "ErrorDetail":
        return cls(CLIENT_TIMEOUT, CLIENT_TIMEOUT)


@dataclass
class ShippingApiResponse(Generic[T]):
    api_response: Optional[T] = None
    errors: List[ErrorDetail] = field(default_factory=list)
    http_status: Optional[int] = None
    request_time: float = 0.0
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        if self.errors or self.http_status is None:
            return False
        return 200 <= self.http_status < 300


class ShippingApiRequest:
    """Base class for typed request payloads.

    Subclasses override `body()` and `query()`; the dispatcher injects the
    bearer token through `authorization` just before each attempt and clears
    it once the call ends.
    """

    content_type: str = "application/json"
    authorization_scheme: str = "Bearer"

    def __init__(self) -> None:
        self.authorization: str | None = None

    def body(self) -> Any:
        return None

    def query(self) -> Dict[str, Any]:
        return {}

    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": self.content_type, "Accept": "application/json"}
        if self.authorization:
            headers["Authorization"] = f"{self.authorization_scheme} {self.authorization}"
        return headers


class EmptyRequest(ShippingApiRequest):
    """Request without a payload, e.g. a GET or a DELETE by id."""

    pass
