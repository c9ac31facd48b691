import importlib

import pytest

from shippingapi import Session, config, configure, default_session, settings

cfg_mod = importlib.import_module("shippingapi.config")


def test_configure_rejects_unknown_setting():
    with pytest.raises(AttributeError):
        configure(not_a_setting=1)


def test_config_context_restores_previous_values():
    before = settings().retries
    with config(retries=7, timeout_ms=500):
        assert settings().retries == 7
        assert settings().timeout_ms == 500
    assert settings().retries == before


def test_environment_overlays_credentials(monkeypatch):
    monkeypatch.setenv("SHIPPINGAPI_API_KEY", "env-key")
    monkeypatch.setenv("SHIPPINGAPI_API_SECRET", "env-secret")
    monkeypatch.setenv("SHIPPINGAPI_BASE_URL", "https://env.api")

    s = settings()

    assert (s.api_key, s.api_secret, s.base_url) == ("env-key", "env-secret", "https://env.api")
    # global defaults stay untouched
    assert cfg_mod._global_settings.api_key is None


def test_session_from_settings_copies_policy():
    with config(retries=5, throw_exceptions=True, retryable_error_codes=("A", "B")):
        session = Session.from_settings(timeout_ms=250)

    assert session.retries == 5
    assert session.throw_exceptions is True
    assert session.timeout_ms == 250
    assert session.retryable_error_codes == frozenset({"A", "B"})
    assert session.auth_token is None


def test_session_rejects_non_positive_retries():
    with pytest.raises(ValueError):
        Session(retries=0)


def test_default_session_is_created_once():
    with config(retries=2):
        first = default_session()
    assert default_session() is first
    assert first.retries == 2


def test_endpoint_joins_base_url():
    session = Session(base_url="https://mock.api/")
    assert session.endpoint("/shippingservices/v1/pickups/schedule") == (
        "https://mock.api/shippingservices/v1/pickups/schedule"
    )
