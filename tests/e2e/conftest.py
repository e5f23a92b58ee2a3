"""
E2E fixtures: a full TocsinApp behind FastAPI's TestClient.
"""

from typing import Any

import pytest
from fastapi.testclient import TestClient

from tocsin.config import Settings
from tocsin.main import TocsinApp
from tocsin.presentation.api.dependencies import set_container


@pytest.fixture
def make_app(jwt_secret):
    """Factory for TocsinApp instances with test settings."""

    def _make(**overrides: Any) -> TocsinApp:
        values = {
            "jwt_secret": jwt_secret,
            "shutdown_grace_period": 0,
            "log_level": "warning",
        }
        values.update(overrides)
        return TocsinApp(Settings(**values))

    yield _make

    set_container(None)


@pytest.fixture
def tocsin_app(make_app) -> TocsinApp:
    return make_app()


@pytest.fixture
def client(tocsin_app):
    """TestClient with lifespan started."""
    with TestClient(tocsin_app.app) as test_client:
        yield test_client
