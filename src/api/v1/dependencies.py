"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from fastapi import Depends, Request

from api.dependencies.auth import get_auth_provider
from core.config import settings
from domain.services.auth_service import AuthService
from domain.services.group_service import GroupService
from domain.services.message_service import MessageService
from domain.services.realtime_gateway import RealtimeGateway
from domain.services.task_service import TaskService
from domain.services.user_service import UserService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.password import BcryptPasswordHasher
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


def get_gateway(request: Request) -> RealtimeGateway | None:
    """The realtime gateway owned by the running application."""
    return getattr(request.app.state, "gateway", None)


@lru_cache
def get_password_hasher() -> BcryptPasswordHasher:
    """Get password hasher instance."""
    return BcryptPasswordHasher()


def get_auth_service(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork] = Depends(get_uow_factory),
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
    password_hasher: BcryptPasswordHasher = Depends(get_password_hasher),
    gateway: RealtimeGateway | None = Depends(get_gateway),
) -> AuthService:
    """Get Auth service instance."""
    return AuthService(uow_factory, auth_provider, password_hasher, gateway=gateway)


def get_user_service(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork] = Depends(get_uow_factory),
) -> UserService:
    """Get User service instance."""
    return UserService(uow_factory)


def get_group_service(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork] = Depends(get_uow_factory),
    gateway: RealtimeGateway | None = Depends(get_gateway),
) -> GroupService:
    """Get Group service instance."""
    return GroupService(uow_factory, gateway=gateway)


def get_task_service(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork] = Depends(get_uow_factory),
    gateway: RealtimeGateway | None = Depends(get_gateway),
) -> TaskService:
    """Get Task service instance."""
    return TaskService(uow_factory, gateway=gateway)


def get_message_service(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork] = Depends(get_uow_factory),
) -> MessageService:
    """Get Message service instance."""
    return MessageService(uow_factory, max_page_size=settings.message_page_size_max)
