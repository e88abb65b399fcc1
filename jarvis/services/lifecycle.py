"""KeyLifecycle - API key issuance and confirmation state machine.

States:
    needs_confirmation --confirm(code)--> active
    active --update_email--> needs_confirmation (new code)

A key is created active when its source is trusted, otherwise it waits
for the owner to exchange the emailed confirmation code.
"""

from __future__ import annotations

import secrets
import uuid

import structlog
from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from jarvis.concurrency.locks import get_email_lock, get_key_lock
from jarvis.errors import AuthError, NotFoundError, ValidationError
from jarvis.models.api_key import ApiKey, ClientSource, KeyStatus, utcnow
from jarvis.services.notifications import ConfirmationNotifier
from jarvis.services.policy import TrustPolicy
from jarvis.store.keys import KeyStore

logger = structlog.get_logger()

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(raw: str | None) -> str | None:
    """Return the trimmed, lower-cased email, or None if it is not one."""
    if not raw:
        return None
    try:
        email = _email_adapter.validate_python(raw.strip())
    except PydanticValidationError:
        return None
    return email.lower()


class KeyLifecycle:
    """Creates and updates API keys and moves them between statuses."""

    def __init__(
        self,
        store: KeyStore,
        policy: TrustPolicy,
        notifier: ConfirmationNotifier,
    ) -> None:
        self._store = store
        self._policy = policy
        self._notifier = notifier
        self._log = logger.bind(component="key_lifecycle")

    @staticmethod
    def generate_code() -> str:
        """Generate a single-use confirmation code."""
        return secrets.token_urlsafe(24)

    async def register(
        self,
        email: str | None,
        source: ClientSource | None,
        identifier: str | None = None,
    ) -> ApiKey:
        """Register an email from a client, or re-register it.

        Args:
            email: Owner email
            source: Parsed client source
            identifier: Existing key of the caller, if any. When it names a
                key with a different email, that key moves to the new email.

        Returns:
            The created or updated key

        Raises:
            ValidationError: If email or source is missing or malformed
        """
        normalized = normalize_email(email)
        if normalized is None or source is None:
            raise ValidationError()

        if identifier:
            existing = await self._store.get(identifier)
            if existing is not None and existing.email != normalized:
                return await self._change_email(identifier, normalized)

        email_lock = await get_email_lock(normalized)
        async with email_lock:
            api_key = await self._store.get_by_email(normalized)
            if api_key is None:
                return await self._create(normalized, source)
            return await self._reregister(api_key, source)

    async def _create(self, email: str, source: ClientSource) -> ApiKey:
        api_key = ApiKey(
            id=str(uuid.uuid4()),
            email=email,
            source=source,
            status=self._policy.initial_status(source),
        )
        code = None
        if api_key.status == KeyStatus.NEEDS_CONFIRMATION:
            code = self.generate_code()
            api_key.require_confirmation(code)
        else:
            api_key.confirmed_at = utcnow()

        await self._store.save(api_key)
        await self._store.commit()

        self._log.info(
            "key.register.created",
            api_key_id=api_key.id,
            source=source.value,
            status=api_key.status.value,
        )
        if code is not None:
            await self._notifier.notify(api_key, code)
        return api_key

    async def _reregister(self, api_key: ApiKey, source: ClientSource) -> ApiKey:
        """Apply a repeat registration for the same email to its existing key."""
        api_key.source = source
        api_key.updated_at = utcnow()

        code = None
        if self._policy.is_trusted(source):
            if not api_key.is_active:
                api_key.activate()
        elif not api_key.is_active:
            # Lost or expired email: issue a fresh code
            code = self.generate_code()
            api_key.require_confirmation(code)

        await self._store.save(api_key)
        await self._store.commit()

        self._log.info(
            "key.register.existing",
            api_key_id=api_key.id,
            source=source.value,
            status=api_key.status.value,
        )
        if code is not None:
            await self._notifier.notify(api_key, code)
        return api_key

    async def confirm(self, code: str | None) -> bool:
        """Exchange a confirmation code for an active key.

        Raises:
            NotFoundError: If no key holds this code (including a code
                that was already used)
        """
        if not code:
            raise NotFoundError()

        api_key = await self._store.get_by_confirmation_code(code)
        if api_key is None:
            raise NotFoundError()

        key_lock = await get_key_lock(api_key.id)
        async with key_lock:
            # Re-check after acquiring lock
            api_key = await self._store.get_by_confirmation_code(code)
            if api_key is None:
                raise NotFoundError()

            api_key.activate()
            await self._store.save(api_key)
            await self._store.commit()

        self._log.info("key.confirmed", api_key_id=api_key.id)
        return True

    async def update_email(self, identifier: str | None, new_email: str | None) -> ApiKey:
        """Move a key to a new email; the key must be confirmed again.

        Raises:
            ValidationError: If identifier or email is missing or malformed
            NotFoundError: If the key does not exist
        """
        normalized = normalize_email(new_email)
        if not identifier or normalized is None:
            raise ValidationError()
        return await self._change_email(identifier, normalized)

    async def _change_email(self, identifier: str, email: str) -> ApiKey:
        # Only existing keys get a lock entry
        if await self._store.get(identifier) is None:
            raise NotFoundError()

        key_lock = await get_key_lock(identifier)
        async with key_lock:
            # Re-check after acquiring lock
            api_key = await self._store.get(identifier)
            if api_key is None:
                raise NotFoundError()

            code = self.generate_code()
            api_key.email = email
            api_key.require_confirmation(code)
            await self._store.save(api_key)
            await self._store.commit()

        self._log.info("key.email_updated", api_key_id=api_key.id)
        await self._notifier.notify(api_key, code)
        return api_key

    async def ping(self, identifier: str | None) -> ApiKey:
        """Check that a key may be used to send links.

        Raises:
            ValidationError: If identifier is missing
            AuthError: If the key is unknown or not active
        """
        if not identifier:
            raise ValidationError()

        api_key = await self._store.get(identifier)
        if api_key is None or not api_key.is_active:
            raise AuthError()
        return api_key
