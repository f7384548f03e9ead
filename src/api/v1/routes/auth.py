"""Auth API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_auth_service
from api.v1.schemas.auth import (
    AuthData,
    AuthResponse,
    LoginRequest,
    SignupRequest,
    UserResponse,
)
from api.v1.schemas.common import MessageResponse
from core.rate_limit import limiter
from domain.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
    responses={
        201: {"description": "Account created"},
        409: {"description": "User already exists"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def signup(
    request: Request,
    body: SignupRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Create an account and return a session token with the public profile."""
    token, user = await service.signup(body.email, body.password, body.name)
    return AuthResponse(
        message="User created successfully",
        data=AuthData(token=token, user=UserResponse.model_validate(user)),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in",
    responses={
        200: {"description": "Logged in"},
        400: {"description": "Invalid credentials"},
    },
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def login(
    request: Request,
    body: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Verify credentials, mark the user online and return a session token."""
    token, user = await service.login(body.email, body.password)
    return AuthResponse(
        message="Login successful",
        data=AuthData(token=token, user=UserResponse.model_validate(user)),
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    responses={401: {"description": "Not authenticated"}},
)
@limiter.limit("10/minute")  # type: ignore[untyped-decorator]
async def logout(
    request: Request,
    user: CurrentUser,
    service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Mark the caller offline and close their realtime connection."""
    await service.logout(user.email)
    return MessageResponse(message="Logged out successfully")
