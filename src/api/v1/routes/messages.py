"""Chat history API routes."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_message_service
from api.v1.schemas.message import ChatMessageListResponse, ChatMessageResponse
from core.config import settings
from core.rate_limit import limiter
from domain.services.message_service import MessageService

router = APIRouter(prefix="/groups", tags=["messages"])


@router.get(
    "/{group_id}/messages",
    response_model=ChatMessageListResponse,
    summary="Get group chat history",
    responses={
        403: {"description": "Not a member"},
        404: {"description": "Group not found"},
    },
)
@limiter.limit("30/minute")  # type: ignore[untyped-decorator]
async def get_messages(
    request: Request,
    group_id: UUID,
    user: CurrentUser,
    limit: int = Query(
        settings.message_page_size, ge=1, le=settings.message_page_size_max
    ),
    before: datetime | None = Query(None, description="Only messages older than this"),
    service: MessageService = Depends(get_message_service),
) -> ChatMessageListResponse:
    """
    Get a window of chat history, oldest first.

    The window holds the ``limit`` newest messages (older than ``before`` when
    given). Pass the ``created_at`` of the first message as ``before`` to page back.
    """
    messages = await service.get_history(group_id, user.email, before=before, limit=limit)
    data = [ChatMessageResponse.model_validate(m) for m in messages]
    return ChatMessageListResponse(
        data=data,
        meta={
            "count": len(data),
            "limit": limit,
            "next_before": data[0].created_at.isoformat() if len(data) == limit else None,
        },
    )
