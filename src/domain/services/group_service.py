"""Group service layer with business logic."""

from typing import TYPE_CHECKING, Callable, List, Optional

from uuid import UUID

from core.exceptions import (
    AlreadyAGroupMemberError,
    GroupMemberNotFoundError,
    GroupNotFoundError,
    InsufficientPermissionsError,
    LastAdminError,
    NotAGroupMemberError,
    NotInvitedError,
    ValidationError,
)
from domain.entities.group import Group, GroupMember, GroupRole, MembershipStatus
from domain.entities.user import normalize_identity
from domain.repositories.unit_of_work import IUnitOfWork

if TYPE_CHECKING:
    from domain.services.realtime_gateway import RealtimeGateway


def _normalize_invitees(emails: List[str], exclude: str) -> List[str]:
    """Normalize, de-duplicate (keeping order) and drop the excluded identity."""
    seen: list[str] = []
    for email in emails:
        normalized = normalize_identity(email)
        if normalized and normalized != exclude and normalized not in seen:
            seen.append(normalized)
    return seen


class GroupService:
    """Service layer for groups and their memberships."""

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        gateway: Optional["RealtimeGateway"] = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._gateway = gateway

    async def create(self, user_email: str, name: str, members: List[str]) -> Group:
        """Create a group. The creator becomes its active admin, invitees are pending."""
        name = name.strip()
        if not name:
            raise ValidationError("Group name is required")

        group = Group(name=name, created_by=user_email)
        group.members.append(
            GroupMember(
                group_id=group.id,
                email=user_email,
                status=MembershipStatus.ACTIVE,
                role=GroupRole.ADMIN,
            )
        )
        for email in _normalize_invitees(members, exclude=user_email):
            group.members.append(GroupMember(group_id=group.id, email=email))

        async with self._uow_factory() as uow:
            created = await uow.groups.create(group)
            await uow.commit()

        if self._gateway:
            await self._gateway.group_created(created)
        return created

    async def list_for_user(self, user_email: str) -> List[Group]:
        """Get all groups where the user is an active member."""
        async with self._uow_factory() as uow:
            return await uow.groups.get_for_member(user_email, MembershipStatus.ACTIVE)

    async def get(self, group_id: UUID, user_email: str) -> Group:
        """Get one group with its members. Requires active membership."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            if not group.is_active_member(user_email):
                raise NotAGroupMemberError(str(group_id))
            return group

    async def accept(self, group_id: UUID, user_email: str) -> Group:
        """Accept a pending invitation."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            member = group.get_member(user_email)
            if member is None:
                raise NotInvitedError(str(group_id))
            if member.is_active:
                raise AlreadyAGroupMemberError(user_email)

            await uow.groups.update_member_status(
                group_id, user_email, MembershipStatus.ACTIVE
            )
            await uow.commit()
            member.status = MembershipStatus.ACTIVE

        if self._gateway:
            await self._gateway.invitation_accepted(group_id, user_email)
        return group

    async def leave(self, group_id: UUID, user_email: str) -> None:
        """Remove the caller's own active membership."""
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)

            if not group.is_active_member(user_email):
                raise NotAGroupMemberError(str(group_id))
            if group.is_last_admin(user_email):
                raise LastAdminError()

            await uow.groups.remove_member(group_id, user_email)
            await uow.commit()

        if self._gateway:
            await self._gateway.member_left(group_id, user_email)

    async def invite(
        self, group_id: UUID, user_email: str, users: List[str]
    ) -> Group:
        """Invite users as pending members. Requires group admin.

        Addresses that already hold a membership (pending or active) are skipped.
        """
        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            self._require_admin(group, user_email)

            invitees = [
                email
                for email in _normalize_invitees(users, exclude=user_email)
                if group.get_member(email) is None
            ]
            if invitees:
                new_members = [GroupMember(group_id=group_id, email=e) for e in invitees]
                await uow.groups.add_members(new_members)
                await uow.commit()
                group.members.extend(new_members)

        if self._gateway and invitees:
            await self._gateway.invitations_sent(group, invitees, invited_by=user_email)
        return group

    async def remove_member(
        self, group_id: UUID, user_email: str, target_email: str
    ) -> Group:
        """Remove a membership. Requires group admin; the last admin cannot be removed."""
        target_email = normalize_identity(target_email)

        async with self._uow_factory() as uow:
            group = await self._get_group(uow, group_id)
            self._require_admin(group, user_email)

            if group.get_member(target_email) is None:
                raise GroupMemberNotFoundError(target_email)
            if group.is_last_admin(target_email):
                raise LastAdminError()

            await uow.groups.remove_member(group_id, target_email)
            await uow.commit()
            group.remove_member(target_email)

        if self._gateway:
            await self._gateway.member_removed(group_id, target_email)
        return group

    # --- Helpers ---

    async def _get_group(self, uow: IUnitOfWork, group_id: UUID) -> Group:
        group = await uow.groups.get(group_id)
        if not group:
            raise GroupNotFoundError(str(group_id))
        return group

    def _require_admin(self, group: Group, user_email: str) -> None:
        if not group.is_active_admin(user_email):
            raise InsufficientPermissionsError("admin")
