"""
shippingapi – Python client for the Pitney Bowes shipping APIs

Public surface:
- Dispatch: get, post, put, delete, delete_with_body (+ async_ variants), dispatch
- Session: Session, Counters, default_session, set_default_session
- Auth: AuthToken, fetch_token, async_fetch_token
- Transports: RequestsRequester, HttpxRequester
- Resources: verify_address, verify_suggest_address, schedule_pickup, cancel_pickup
- Builders: AddressFluent, PickupFluent
- Config: configure, config (context manager), settings
"""

__version__ = "0.1.0"

from .config import configure, config, settings, Settings
from .errors import (
    SDKError,
    AuthError,
    BadRequestError,
    DeserializationError,
    ShippingAPIError,
)
from .response import ErrorDetail, HttpVerb, ShippingApiRequest, ShippingApiResponse, EmptyRequest
from .auth import AuthToken, fetch_token, async_fetch_token
from .requester import RequestsRequester, HttpxRequester
from .session import Session, Counters, default_session, set_default_session
from .webmethod import (
    DispatchResult,
    dispatch,
    async_dispatch,
    is_retryable,
    get,
    post,
    put,
    delete,
    delete_with_body,
    async_get,
    async_post,
    async_put,
    async_delete,
    async_delete_with_body,
)
from .model import Address, AddressStatus, AddressSuggestions, Carrier, PackageLocation, Pickup, PickupCount
from .api import verify_address, verify_suggest_address, schedule_pickup, cancel_pickup
from .fluent import AddressFluent, PickupFluent

__all__ = [
    # Config
    "configure",
    "config",
    "settings",
    "Settings",
    # Errors
    "SDKError",
    "AuthError",
    "BadRequestError",
    "DeserializationError",
    "ShippingAPIError",
    # Envelopes
    "ErrorDetail",
    "HttpVerb",
    "ShippingApiRequest",
    "ShippingApiResponse",
    "EmptyRequest",
    # Auth & transports
    "AuthToken",
    "fetch_token",
    "async_fetch_token",
    "RequestsRequester",
    "HttpxRequester",
    # Session
    "Session",
    "Counters",
    "default_session",
    "set_default_session",
    # Dispatch
    "DispatchResult",
    "dispatch",
    "async_dispatch",
    "is_retryable",
    "get",
    "post",
    "put",
    "delete",
    "delete_with_body",
    "async_get",
    "async_post",
    "async_put",
    "async_delete",
    "async_delete_with_body",
    # Model & resources
    "Address",
    "AddressStatus",
    "AddressSuggestions",
    "Carrier",
    "PackageLocation",
    "Pickup",
    "PickupCount",
    "verify_address",
    "verify_suggest_address",
    "schedule_pickup",
    "cancel_pickup",
    # Builders
    "AddressFluent",
    "PickupFluent",
    "__version__",
]
