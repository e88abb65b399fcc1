"""Unit tests for RegistrationService and the source trust policy."""

from __future__ import annotations

import pytest

from jarvis.errors import ValidationError
from jarvis.models.api_key import ClientSource, KeyStatus
from jarvis.services.lifecycle import KeyLifecycle
from jarvis.services.policy import TrustPolicy
from jarvis.services.registration import RegistrationService
from jarvis.store.keys import KeyStore
from tests.fakes import RecordingNotifier


class TestTrustPolicy:
    def test_default_table(self):
        policy = TrustPolicy.from_trusted()

        assert policy.initial_status(ClientSource.IOS) == KeyStatus.ACTIVE
        assert policy.initial_status(ClientSource.ANDROID) == KeyStatus.ACTIVE
        for source in (
            ClientSource.CHROME,
            ClientSource.FIREFOX,
            ClientSource.BOOKMARKLET,
            ClientSource.OTHER,
        ):
            assert policy.initial_status(source) == KeyStatus.NEEDS_CONFIRMATION

    def test_custom_trusted_sources(self):
        policy = TrustPolicy.from_trusted([ClientSource.CHROME])

        assert policy.is_trusted(ClientSource.CHROME)
        assert not policy.is_trusted(ClientSource.IOS)

    def test_table_must_cover_every_source(self):
        with pytest.raises(ValueError, match="no entry"):
            TrustPolicy({ClientSource.IOS: KeyStatus.ACTIVE})

    def test_table_is_read_only(self):
        policy = TrustPolicy.from_trusted()

        with pytest.raises(TypeError):
            policy.table[ClientSource.CHROME] = KeyStatus.ACTIVE  # type: ignore[index]


class TestClientSourceParse:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("chrome", ClientSource.CHROME),
            ("iOS", ClientSource.IOS),
            (" Bookmarklet ", ClientSource.BOOKMARKLET),
            ("safari", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse(self, raw, expected):
        assert ClientSource.parse(raw) == expected


@pytest.fixture
def registration(lifecycle: KeyLifecycle) -> RegistrationService:
    return RegistrationService(lifecycle)


class TestRegistrationService:
    async def test_ios_is_active(self, registration: RegistrationService):
        api_key = await registration.register("ios@doe.net", "ios")

        assert api_key.status == KeyStatus.ACTIVE
        assert api_key.source == ClientSource.IOS

    async def test_chrome_needs_confirmation(
        self,
        registration: RegistrationService,
        notifier: RecordingNotifier,
    ):
        api_key = await registration.register("chrome@doe.net", "Chrome")

        assert api_key.status == KeyStatus.NEEDS_CONFIRMATION
        assert len(notifier.sent) == 1

    async def test_unknown_source_rejected(self, registration: RegistrationService, store: KeyStore):
        with pytest.raises(ValidationError, match="Missing data"):
            await registration.register("who@doe.net", "netscape")

        assert await store.get_by_email("who@doe.net") is None

    async def test_missing_source_uses_default(self, registration: RegistrationService):
        api_key = await registration.register(
            "ext@doe.net", None, default_source=ClientSource.CHROME
        )

        assert api_key.source == ClientSource.CHROME

    async def test_missing_everything(self, registration: RegistrationService):
        with pytest.raises(ValidationError):
            await registration.register(None, None)

    async def test_policy_change_is_data_only(self, store: KeyStore, notifier: RecordingNotifier):
        lifecycle = KeyLifecycle(
            store=store,
            policy=TrustPolicy.from_trusted([ClientSource.FIREFOX]),
            notifier=notifier,
        )
        registration = RegistrationService(lifecycle)

        api_key = await registration.register("fox@doe.net", "firefox")

        assert api_key.status == KeyStatus.ACTIVE
        assert notifier.sent == []
