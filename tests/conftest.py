import sys
from pathlib import Path

import pytest

# Ensure the src layout is importable as top-level `shippingapi`
PROJECT_ROOT = Path(__file__).resolve().parent.parent
SRC_ROOT = PROJECT_ROOT / "src"
if SRC_ROOT.exists() and str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


@pytest.fixture(autouse=True)
def _isolated_defaults(monkeypatch):
    from shippingapi import session as session_mod

    for env in ("SHIPPINGAPI_BASE_URL", "SHIPPINGAPI_API_KEY", "SHIPPINGAPI_API_SECRET"):
        monkeypatch.delenv(env, raising=False)
    monkeypatch.setattr(session_mod, "_default_session", None)
    yield
