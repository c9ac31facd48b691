from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, asdict, field, replace
from typing import Any
import os


DEFAULT_RETRYABLE_ERROR_CODES = ("PB-APIM-ERR-1003",)


@dataclass
class Settings:
    """SDK configuration with environment overlay.

    Sessions built with `Session.from_settings` copy these values; changing the
    settings afterwards does not affect sessions that already exist.
    """

    base_url: str = "https://api-sandbox.pitneybowes.com"
    api_key: str | None = None
    api_secret: str | None = None
    token_path: str = "/oauth/token"

    # dispatch policy
    retries: int = 3
    timeout_ms: int = 60_000
    throw_exceptions: bool = False
    retryable_error_codes: tuple[str, ...] = field(default_factory=lambda: DEFAULT_RETRYABLE_ERROR_CODES)

    # per physical HTTP exchange, seconds
    http_timeout: float = 30.0

    # address verification
    minimal_address_validation: bool = False


_global_settings = Settings()
_stack: list[Settings] = []


def _from_env(s: Settings) -> Settings:
    return replace(
        s,
        base_url=os.getenv("SHIPPINGAPI_BASE_URL", s.base_url),
        api_key=os.getenv("SHIPPINGAPI_API_KEY", s.api_key),
        api_secret=os.getenv("SHIPPINGAPI_API_SECRET", s.api_secret),
    )


def configure(**kwargs: Any) -> None:
    """Configure global SDK defaults.

    Example:
        configure(retries=5, timeout_ms=10_000)
    """
    global _global_settings
    for k, v in kwargs.items():
        if not hasattr(_global_settings, k):
            raise AttributeError(f"Unknown setting: {k}")
        setattr(_global_settings, k, v)


@contextmanager
def config(**kwargs: Any):
    """Temporarily apply settings within a context."""
    global _global_settings
    _stack.append(Settings(**asdict(_global_settings)))
    try:
        configure(**kwargs)
        yield
    finally:
        prev = _stack.pop()
        _global_settings = prev


def settings() -> Settings:
    """Return the effective merged settings (env overlaid on current)."""
    return _from_env(_global_settings)
