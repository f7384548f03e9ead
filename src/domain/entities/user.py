"""User domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class PresenceStatus(StrEnum):
    """Presence state of a user."""

    ONLINE = "online"
    OFFLINE = "offline"


def normalize_identity(email: str) -> str:
    """Case-normalize an email address so it can be used as an identity."""
    return email.strip().lower()


@dataclass
class User:
    """Domain entity for a registered user."""

    email: str
    name: str
    password_hash: str
    id: UUID = field(default_factory=uuid4)
    avatar_url: str | None = None
    status: PresenceStatus = PresenceStatus.OFFLINE
    last_seen: datetime = field(default_factory=datetime.utcnow)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        self.email = normalize_identity(self.email)
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at

    def set_presence(self, status: PresenceStatus) -> None:
        """Update presence and stamp last-seen."""
        self.status = status
        self.last_seen = datetime.utcnow()
