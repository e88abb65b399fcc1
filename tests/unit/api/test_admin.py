"""Tests for the /jarvis admin dashboard."""

from __future__ import annotations

import httpx
import pytest

from jarvis.api import dependencies
from jarvis.config import AdminConfig, Settings


@pytest.fixture
def admin_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    settings = Settings(admin=AdminConfig(username="admin", password="s3cret"))
    monkeypatch.setattr(dependencies, "get_settings", lambda: settings)
    return settings


class TestDashboardAuth:
    async def test_rejected_when_not_configured(
        self,
        client: httpx.AsyncClient,
        monkeypatch: pytest.MonkeyPatch,
    ):
        monkeypatch.setattr(dependencies, "get_settings", lambda: Settings(admin=AdminConfig()))

        response = await client.get("/jarvis", auth=("admin", ""))

        assert response.status_code == 401

    async def test_missing_credentials(self, client: httpx.AsyncClient, admin_settings):
        response = await client.get("/jarvis")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Basic"

    async def test_wrong_password(self, client: httpx.AsyncClient, admin_settings):
        response = await client.get("/jarvis", auth=("admin", "guess"))

        assert response.status_code == 401


class TestDashboard:
    async def test_counts(self, client: httpx.AsyncClient, admin_settings):
        await client.post("/api/register", data={"email": "ios@doe.net", "source": "ios"})
        chrome = await client.post(
            "/api/register", data={"email": "ext@doe.net", "source": "chrome"}
        )
        ios = await client.post("/api/register", data={"email": "ios@doe.net", "source": "ios"})
        await client.post(
            "/api/send",
            data={"api-key": ios.json()["uuid"], "link": "https://a.com", "queued": "yes"},
        )

        response = await client.get("/jarvis", auth=("admin", "s3cret"))

        assert response.status_code == 200
        body = response.json()
        assert body["keys_by_status"] == {"active": 1, "needs_confirmation": 1}
        assert body["keys_by_source"] == {"ios": 1, "chrome": 1}
        assert body["pending_links"] == 1
        assert body["delivery_log_entries"] == 0
        assert body["dispatcher"]["running"] is False
        assert chrome.json()["status"] == "needs_confirmation"
