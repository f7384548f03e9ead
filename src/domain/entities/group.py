"""Group domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4


class GroupRole(str, Enum):
    """Role within a group."""

    ADMIN = "admin"
    MEMBER = "member"


class MembershipStatus(str, Enum):
    """Lifecycle of a group membership."""

    PENDING = "pending"
    ACTIVE = "active"


@dataclass
class GroupMember:
    """Domain entity for a group membership."""

    group_id: UUID
    email: str
    status: MembershipStatus = MembershipStatus.PENDING
    role: GroupRole = GroupRole.MEMBER
    joined_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == MembershipStatus.ACTIVE

    @property
    def is_active_admin(self) -> bool:
        return self.is_active and self.role == GroupRole.ADMIN


@dataclass
class Group:
    """Domain entity for a chat/task group and its memberships."""

    name: str
    created_by: str
    id: UUID = field(default_factory=uuid4)
    members: list[GroupMember] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def get_member(self, email: str) -> GroupMember | None:
        """Find the membership of an identity, whatever its status."""
        for member in self.members:
            if member.email == email:
                return member
        return None

    def is_active_member(self, email: str) -> bool:
        member = self.get_member(email)
        return member is not None and member.is_active

    def is_active_admin(self, email: str) -> bool:
        member = self.get_member(email)
        return member is not None and member.is_active_admin

    def is_last_admin(self, email: str) -> bool:
        """True when removing this identity would leave no active admin."""
        member = self.get_member(email)
        if member is None or not member.is_active_admin:
            return False
        return sum(1 for m in self.members if m.is_active_admin) == 1

    def remove_member(self, email: str) -> None:
        self.members = [m for m in self.members if m.email != email]
