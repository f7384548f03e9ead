"""Group repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.group import Group, GroupMember, MembershipStatus


class IGroupRepository(Protocol):
    """Repository interface for Group entities and their memberships."""

    async def get(self, id: UUID) -> Group | None:
        """Get a group by ID, memberships included."""
        ...

    async def get_for_member(
        self, email: str, status: MembershipStatus
    ) -> list[Group]:
        """Get all groups where the identity holds a membership in the given status."""
        ...

    async def get_active_group_ids(self, email: str) -> list[UUID]:
        """Get IDs of all groups where the identity is an active member."""
        ...

    async def create(self, group: Group) -> Group:
        """Create a group together with its initial memberships."""
        ...

    async def get_member(
        self, group_id: UUID, email: str, for_update: bool = False
    ) -> GroupMember | None:
        """Get a membership, optionally locking its row until commit."""
        ...

    async def add_members(self, members: list[GroupMember]) -> list[GroupMember]:
        """Add memberships to a group."""
        ...

    async def update_member_status(
        self, group_id: UUID, email: str, status: MembershipStatus
    ) -> GroupMember:
        """Change the status of a membership."""
        ...

    async def remove_member(self, group_id: UUID, email: str) -> bool:
        """Remove a membership."""
        ...
