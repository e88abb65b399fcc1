"""API key data model.

An ApiKey ties an opaque UUID handle to an owner email and the client
that registered it. Keys start either active or waiting for their
confirmation code, depending on the client source.
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Optional

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


class KeyStatus(str, Enum):
    """API key status.

    A key that no longer exists is treated as revoked.
    """

    NEEDS_CONFIRMATION = "needs_confirmation"
    ACTIVE = "active"


class ClientSource(str, Enum):
    """Client that registered the key."""

    CHROME = "chrome"
    FIREFOX = "firefox"
    IOS = "ios"
    ANDROID = "android"
    BOOKMARKLET = "bookmarklet"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: str | None) -> Optional["ClientSource"]:
        """Parse a client-supplied source code, case-insensitively."""
        if not raw:
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


class ApiKey(SQLModel, table=True):
    """API key for one owner email."""

    __tablename__ = "api_keys"

    id: str = Field(primary_key=True)  # UUID4, exposed as "uuid"
    email: str = Field(index=True)
    source: ClientSource = Field(default=ClientSource.OTHER)
    status: KeyStatus = Field(default=KeyStatus.NEEDS_CONFIRMATION)

    # Only set while status is NEEDS_CONFIRMATION
    confirmation_code: Optional[str] = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    confirmed_at: Optional[datetime] = Field(default=None)

    @property
    def is_active(self) -> bool:
        return self.status == KeyStatus.ACTIVE

    def activate(self) -> None:
        self.status = KeyStatus.ACTIVE
        self.confirmation_code = None
        self.confirmed_at = utcnow()
        self.updated_at = self.confirmed_at

    def require_confirmation(self, code: str) -> None:
        self.status = KeyStatus.NEEDS_CONFIRMATION
        self.confirmation_code = code
        self.confirmed_at = None
        self.updated_at = utcnow()

    def public_view(self) -> dict[str, Any]:
        """Client-facing projection of the key."""
        return {
            "email": self.email,
            "source": self.source.value,
            "uuid": self.id,
            "status": self.status.value,
        }
