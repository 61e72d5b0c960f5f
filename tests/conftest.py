import json
from pathlib import Path

from httpx import ASGITransport, AsyncClient
import pytest

from request_locale.core.config import LocaleSettings
from request_locale.registry import LocaleRegistry
from request_locale.sources import derive_order


@pytest.fixture
def locale_dir(tmp_path: Path) -> Path:
    """Directory laid out like a typical locale folder."""
    root = tmp_path / "locale"
    root.mkdir()
    (root / "en_US.json").write_text(json.dumps({"hello": "Hello"}))
    (root / "tr_TR.json").write_text(json.dumps({"hello": "Merhaba"}))
    (root / "templates").mkdir()
    return root


@pytest.fixture
def registry() -> LocaleRegistry:
    return LocaleRegistry(supported=("en_US", "tr_TR"), default="en_US")


@pytest.fixture
def make_order():
    """Build lookups from source names with optional key overrides."""

    def _make(names, **overrides):
        settings = LocaleSettings(LOCALES=["en_US"], **overrides)
        return derive_order(names, settings)

    return _make


@pytest.fixture
def make_client():
    """In-process HTTP client for an ASGI app; use with ``async with``."""

    def _make(app) -> AsyncClient:
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _make
