"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.auth import router as auth_router
from api.v1.routes.groups import router as groups_router
from api.v1.routes.messages import router as messages_router
from api.v1.routes.tasks import router as tasks_router
from api.v1.routes.users import router as users_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(users_router)
router.include_router(groups_router)
router.include_router(messages_router)
router.include_router(tasks_router)
