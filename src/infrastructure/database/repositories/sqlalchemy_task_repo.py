"""SQLAlchemy implementation of Task repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from domain.entities.task import Task, TaskPriority, TaskStatus
from infrastructure.database.models import TaskAssigneeModel, TaskModel


class SQLAlchemyTaskRepository:
    """SQLAlchemy implementation of ITaskRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Task | None:
        """Get a task by ID."""
        model = await self._get_model(id)
        return self._to_entity(model) if model else None

    async def list(
        self,
        group_ids: list[UUID],
        assignee: str | None = None,
        status: TaskStatus | None = None,
    ) -> list[Task]:
        """List tasks of the given groups, optionally filtered."""
        if not group_ids:
            return []

        stmt = select(TaskModel).where(TaskModel.group_id.in_(group_ids))
        if assignee is not None:
            stmt = stmt.where(
                TaskModel.id.in_(
                    select(TaskAssigneeModel.task_id).where(TaskAssigneeModel.email == assignee)
                )
            )
        if status is not None:
            stmt = stmt.where(TaskModel.status == status.value)
        stmt = (
            stmt.options(selectinload(TaskModel.assignees))
            .order_by(TaskModel.due_date, TaskModel.created_at)
            .execution_options(populate_existing=True)
        )

        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, task: Task) -> Task:
        """Create a new task."""
        model = TaskModel(
            id=task.id,
            group_id=task.group_id,
            title=task.title,
            description=task.description,
            due_date=task.due_date,
            priority=task.priority.value,
            status=task.status.value,
            created_by=task.created_by,
            created_at=task.created_at,
            updated_at=task.updated_at,
            assignees=[
                TaskAssigneeModel(email=email, position=i)
                for i, email in enumerate(task.assigned_to)
            ],
        )
        self._session.add(model)
        await self._session.flush()
        return task

    async def update(self, task: Task) -> Task:
        """Update an existing task, assignees included."""
        model = await self._get_model(task.id)

        if not model:
            raise ValueError(f"Task {task.id} not found")

        model.title = task.title
        model.description = task.description
        model.due_date = task.due_date
        model.priority = task.priority.value
        model.status = task.status.value
        model.updated_at = task.updated_at

        # Diff assignees in place; replacing rows would collide on the composite PK
        wanted = set(task.assigned_to)
        for assignee in list(model.assignees):
            if assignee.email not in wanted:
                model.assignees.remove(assignee)
        existing = {a.email for a in model.assignees}
        for position, email in enumerate(task.assigned_to):
            if email not in existing:
                model.assignees.append(TaskAssigneeModel(email=email, position=position))

        await self._session.flush()
        return task

    async def _get_model(self, id: UUID) -> TaskModel | None:
        stmt = (
            select(TaskModel)
            .where(TaskModel.id == id)
            .options(selectinload(TaskModel.assignees))
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    def _to_entity(self, model: TaskModel) -> Task:
        """Convert ORM model to domain entity."""
        return Task(
            id=model.id,
            group_id=model.group_id,
            title=model.title,
            description=model.description,
            due_date=model.due_date,
            priority=TaskPriority(model.priority),
            status=TaskStatus(model.status),
            assigned_to=[a.email for a in sorted(model.assignees, key=lambda a: a.position)],
            created_by=model.created_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
