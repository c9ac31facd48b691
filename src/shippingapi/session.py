"""Caller-owned dispatch context.

A Session bundles the cached bearer token, the retry/timeout policy, the
transports and the per-endpoint call counters. Sessions are independent of
each other; the process-wide default only exists once a caller asks for it.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from .auth import AuthToken, async_fetch_token, fetch_token
from .config import Settings, settings
from .requester import HttpxRequester, RequestsRequester


@dataclass
class Counters:
    call_count: int = 0
    error_count: int = 0
    total_time: float = 0.0
    max_time: float = 0.0

    @property
    def success_count(self) -> int:
        return self.call_count - self.error_count

    @property
    def average_time(self) -> float:
        return self.total_time / self.call_count if self.call_count else 0.0


@dataclass
class Session:
    base_url: str = "https://api-sandbox.pitneybowes.com"
    api_key: str | None = None
    api_secret: str | None = None
    token_path: str = "/oauth/token"

    retries: int = 3
    timeout_ms: int = 60_000
    throw_exceptions: bool = False
    retryable_error_codes: frozenset = frozenset({"PB-APIM-ERR-1003"})
    http_timeout: float = 30.0
    minimal_address_validation: bool = False

    auth_token: Optional[AuthToken] = None
    requester: Any = field(default_factory=RequestsRequester)
    async_requester: Any = field(default_factory=HttpxRequester)
    token_provider: Callable[["Session"], Any] = fetch_token
    async_token_provider: Callable[["Session"], Any] = async_fetch_token
    clock: Callable[[], float] = time.monotonic

    counters: Dict[str, Counters] = field(default_factory=dict, repr=False)
    _counter_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.retries < 1:
            raise ValueError(f"retries must be >= 1, got {self.retries}")
        if self.timeout_ms < 0:
            raise ValueError(f"timeout_ms must be >= 0, got {self.timeout_ms}")
        self.retryable_error_codes = frozenset(self.retryable_error_codes)

    @classmethod
    def from_settings(cls, settings_obj: Settings | None = None, **overrides: Any) -> "Session":
        s = settings_obj or settings()
        kwargs: Dict[str, Any] = {
            "base_url": s.base_url,
            "api_key": s.api_key,
            "api_secret": s.api_secret,
            "token_path": s.token_path,
            "retries": s.retries,
            "timeout_ms": s.timeout_ms,
            "throw_exceptions": s.throw_exceptions,
            "retryable_error_codes": frozenset(s.retryable_error_codes),
            "http_timeout": s.http_timeout,
            "minimal_address_validation": s.minimal_address_validation,
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    def endpoint(self, path: str) -> str:
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")

    def valid_token(self) -> Optional[AuthToken]:
        """Return the cached token if it is usable, reading the shared slot once."""
        token = self.auth_token
        if token is None or not token.access_token or token.is_expired():
            return None
        return token

    def update_counters(self, uri: str, success: bool, elapsed: float) -> None:
        with self._counter_lock:
            c = self.counters.setdefault(uri, Counters())
            c.call_count += 1
            if not success:
                c.error_count += 1
            c.total_time += elapsed
            c.max_time = max(c.max_time, elapsed)

    def counters_for(self, uri: str) -> Counters:
        with self._counter_lock:
            c = self.counters.get(uri) or Counters()
            return Counters(c.call_count, c.error_count, c.total_time, c.max_time)

    def reset_counters(self) -> None:
        with self._counter_lock:
            self.counters.clear()


_default_session: Session | None = None


def default_session() -> Session:
    """Return the process-wide default session, creating it from settings on first use."""
    global _default_session
    if _default_session is None:
        _default_session = Session.from_settings()
    return _default_session


def set_default_session(session: Session | None) -> None:
    global _default_session
    _default_session = session
