"""Group API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_group_service
from api.v1.schemas.common import MessageResponse
from api.v1.schemas.group import (
    GroupCreate,
    GroupDetailResponse,
    GroupInvite,
    GroupListResponse,
    GroupResponse,
)
from core.rate_limit import limiter
from domain.services.group_service import GroupService

router = APIRouter(prefix="/groups", tags=["groups"])


@router.post(
    "",
    response_model=GroupDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a group",
    responses={201: {"description": "Group created"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def create_group(
    request: Request,
    body: GroupCreate,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Create a group. The caller becomes its admin; listed members are invited."""
    group = await service.create(user.email, body.name, body.members)
    return GroupDetailResponse(
        message="Group created successfully",
        data=GroupResponse.model_validate(group),
    )


@router.get(
    "",
    response_model=GroupListResponse,
    summary="List my groups",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def list_groups(
    request: Request,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupListResponse:
    """Get all groups where the caller is an active member."""
    groups = await service.list_for_user(user.email)
    data = [GroupResponse.model_validate(g) for g in groups]
    return GroupListResponse(data=data, meta={"total": len(data)})


@router.get(
    "/{group_id}",
    response_model=GroupDetailResponse,
    summary="Get a group",
    responses={
        403: {"description": "Not a member"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    group = await service.get(group_id, user.email)
    return GroupDetailResponse(data=GroupResponse.model_validate(group))


@router.post(
    "/{group_id}/accept",
    response_model=GroupDetailResponse,
    summary="Accept an invitation",
    responses={
        403: {"description": "Not invited"},
        404: {"description": "Group not found"},
        409: {"description": "Already a member"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def accept_invitation(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    group = await service.accept(group_id, user.email)
    return GroupDetailResponse(
        message="Successfully joined the group",
        data=GroupResponse.model_validate(group),
    )


@router.post(
    "/{group_id}/leave",
    response_model=MessageResponse,
    summary="Leave a group",
    responses={
        400: {"description": "Last admin cannot leave"},
        403: {"description": "Not a member"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def leave_group(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> MessageResponse:
    await service.leave(group_id, user.email)
    return MessageResponse(message="Successfully left the group")


@router.post(
    "/{group_id}/invite",
    response_model=GroupDetailResponse,
    summary="Invite users",
    responses={
        403: {"description": "Admin access required"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def invite_users(
    request: Request,
    group_id: UUID,
    body: GroupInvite,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    """Invite users as pending members. Existing members are skipped."""
    group = await service.invite(group_id, user.email, body.users)
    return GroupDetailResponse(
        message="Invitations sent successfully",
        data=GroupResponse.model_validate(group),
    )


@router.post(
    "/{group_id}/remove/{email}",
    response_model=GroupDetailResponse,
    summary="Remove a member",
    responses={
        400: {"description": "Cannot remove the last admin"},
        403: {"description": "Admin access required"},
        404: {"description": "Group or member not found"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def remove_member(
    request: Request,
    group_id: UUID,
    email: str,
    user: CurrentUser,
    service: GroupService = Depends(get_group_service),
) -> GroupDetailResponse:
    group = await service.remove_member(group_id, user.email, email)
    return GroupDetailResponse(
        message="User removed successfully",
        data=GroupResponse.model_validate(group),
    )
