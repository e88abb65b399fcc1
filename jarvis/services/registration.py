"""RegistrationService - client-facing entry point for key registration."""

from __future__ import annotations

from jarvis.models.api_key import ApiKey, ClientSource
from jarvis.services.lifecycle import KeyLifecycle


class RegistrationService:
    """Turns raw client input into a KeyLifecycle.register call.

    The trust policy applied to the parsed source lives in the
    lifecycle's TrustPolicy table.
    """

    def __init__(self, lifecycle: KeyLifecycle) -> None:
        self._lifecycle = lifecycle

    async def register(
        self,
        email: str | None,
        source: str | None,
        identifier: str | None = None,
        *,
        default_source: ClientSource | None = None,
    ) -> ApiKey:
        """Register from raw request values.

        Args:
            email: Raw email
            source: Raw source code (e.g. "chrome", "iOS")
            identifier: Existing API key of the caller, if any
            default_source: Source to assume when the client sent none
                (client-specific routes such as /chrome/register)

        Raises:
            ValidationError: If email or source is missing or unknown
        """
        parsed = ClientSource.parse(source) if source else default_source
        return await self._lifecycle.register(email, parsed, identifier=identifier)
