"""User profile API routes."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_user_service
from api.v1.schemas.auth import ProfileUpdate, UserDetailResponse, UserResponse
from api.v1.schemas.group import GroupListResponse, GroupResponse
from core.rate_limit import limiter
from domain.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/profile",
    response_model=UserDetailResponse,
    summary="Get own profile",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_profile(
    request: Request,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    profile = await service.get_profile(user.email)
    return UserDetailResponse(data=UserResponse.model_validate(profile))


@router.patch(
    "/profile",
    response_model=UserDetailResponse,
    summary="Update own profile",
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def update_profile(
    request: Request,
    body: ProfileUpdate,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    """Update display name and/or avatar. Omitted fields are left unchanged."""
    profile = await service.update_profile(
        user.email,
        name=body.name,
        avatar_url=body.avatar_url,
    )
    return UserDetailResponse(
        message="Profile updated successfully",
        data=UserResponse.model_validate(profile),
    )


@router.get(
    "/invitations",
    response_model=GroupListResponse,
    summary="List pending group invitations",
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_invitations(
    request: Request,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> GroupListResponse:
    groups = await service.get_invitations(user.email)
    data = [GroupResponse.model_validate(g) for g in groups]
    return GroupListResponse(data=data, meta={"total": len(data)})
