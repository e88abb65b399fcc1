"""Fixtures for HTTP-level tests.

The app runs without its lifespan: sessions come from the in-memory
test database and the dispatcher and notifier are fakes.
"""

from __future__ import annotations

import httpx
import pytest

from jarvis.api.dependencies import get_dispatcher, get_notifier
from jarvis.db.session import get_session_dependency
from jarvis.main import create_app


@pytest.fixture
def app(session_scope, dispatcher, notifier):
    app = create_app()

    async def override_session():
        async with session_scope() as session:
            yield session

    app.dependency_overrides[get_session_dependency] = override_session
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_notifier] = lambda: notifier
    return app


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://jarvis.test") as client:
        yield client
