"""SQLAlchemy implementation of Group repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from domain.entities.group import Group, GroupMember, GroupRole, MembershipStatus
from infrastructure.database.models import GroupMemberModel, GroupModel


class SQLAlchemyGroupRepository:
    """SQLAlchemy implementation of IGroupRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Group | None:
        """Get a group by ID, memberships included."""
        stmt = (
            select(GroupModel)
            .where(GroupModel.id == id)
            .options(selectinload(GroupModel.members))
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_member(
        self, email: str, status: MembershipStatus
    ) -> list[Group]:
        """Get all groups where the identity holds a membership in the given status."""
        stmt = (
            select(GroupModel)
            .join(GroupMemberModel, GroupMemberModel.group_id == GroupModel.id)
            .where(
                GroupMemberModel.email == email,
                GroupMemberModel.status == status.value,
            )
            .options(selectinload(GroupModel.members))
            .order_by(GroupModel.created_at)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars().unique()]

    async def get_active_group_ids(self, email: str) -> list[UUID]:
        """Get IDs of all groups where the identity is an active member."""
        stmt = select(GroupMemberModel.group_id).where(
            GroupMemberModel.email == email,
            GroupMemberModel.status == MembershipStatus.ACTIVE.value,
        )
        result = await self._session.execute(stmt)
        return list(result.scalars())

    async def create(self, group: Group) -> Group:
        """Create a group together with its initial memberships."""
        model = GroupModel(
            id=group.id,
            name=group.name,
            created_by=group.created_by,
            created_at=group.created_at,
            members=[self._member_to_model(m) for m in group.members],
        )
        self._session.add(model)
        await self._session.flush()
        return group

    async def get_member(
        self, group_id: UUID, email: str, for_update: bool = False
    ) -> GroupMember | None:
        """Get a membership, optionally locking its row until commit."""
        model = await self._get_member_model(group_id, email, for_update=for_update)
        return self._member_to_entity(model) if model else None

    async def add_members(self, members: list[GroupMember]) -> list[GroupMember]:
        """Add memberships to a group."""
        self._session.add_all([self._member_to_model(m) for m in members])
        await self._session.flush()
        return members

    async def update_member_status(
        self, group_id: UUID, email: str, status: MembershipStatus
    ) -> GroupMember:
        """Change the status of a membership."""
        model = await self._get_member_model(group_id, email)

        if not model:
            raise ValueError("Group member not found")

        model.status = status.value
        await self._session.flush()
        return self._member_to_entity(model)

    async def remove_member(self, group_id: UUID, email: str) -> bool:
        """Remove a membership."""
        model = await self._get_member_model(group_id, email)

        if not model:
            return False

        await self._session.delete(model)
        await self._session.flush()
        return True

    async def _get_member_model(
        self, group_id: UUID, email: str, for_update: bool = False
    ) -> GroupMemberModel | None:
        stmt = select(GroupMemberModel).where(
            GroupMemberModel.group_id == group_id,
            GroupMemberModel.email == email,
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: GroupModel) -> Group:
        """Convert ORM model to domain entity."""
        return Group(
            id=model.id,
            name=model.name,
            created_by=model.created_by,
            created_at=model.created_at,
            members=[self._member_to_entity(m) for m in model.members],
        )

    def _member_to_entity(self, model: GroupMemberModel) -> GroupMember:
        """Convert member ORM model to domain entity."""
        return GroupMember(
            group_id=model.group_id,
            email=model.email,
            status=MembershipStatus(model.status),
            role=GroupRole(model.role),
            joined_at=model.joined_at,
        )

    def _member_to_model(self, entity: GroupMember) -> GroupMemberModel:
        """Convert member domain entity to ORM model."""
        return GroupMemberModel(
            group_id=entity.group_id,
            email=entity.email,
            status=entity.status.value,
            role=entity.role.value,
            joined_at=entity.joined_at,
        )
