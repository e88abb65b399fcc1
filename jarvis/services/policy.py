"""Source trust policy.

Maps each client source to the status a brand-new key starts in.
Adding a source means adding a row, not a branch.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from jarvis.models.api_key import ClientSource, KeyStatus

DEFAULT_TRUSTED_SOURCES = (ClientSource.IOS, ClientSource.ANDROID)


class TrustPolicy:
    """Lookup table from ClientSource to initial KeyStatus."""

    def __init__(self, table: Mapping[ClientSource, KeyStatus]) -> None:
        missing = set(ClientSource) - set(table)
        if missing:
            raise ValueError(f"Trust policy has no entry for: {sorted(s.value for s in missing)}")
        self._table = MappingProxyType(dict(table))

    @classmethod
    def from_trusted(cls, trusted: Iterable[ClientSource] = DEFAULT_TRUSTED_SOURCES) -> "TrustPolicy":
        """Build a table where the given sources are trusted and all others are not."""
        trusted = set(trusted)
        return cls(
            {
                source: KeyStatus.ACTIVE if source in trusted else KeyStatus.NEEDS_CONFIRMATION
                for source in ClientSource
            }
        )

    @property
    def table(self) -> Mapping[ClientSource, KeyStatus]:
        return self._table

    def initial_status(self, source: ClientSource) -> KeyStatus:
        return self._table[source]

    def is_trusted(self, source: ClientSource) -> bool:
        return self._table[source] == KeyStatus.ACTIVE
