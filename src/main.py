"""Main application entry point.

``app`` is the FastAPI application; ``application`` wraps it together with the
Socket.IO server so REST and realtime traffic share one ASGI server.
"""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import socketio
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.dependencies.auth import get_auth_provider
from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.realtime.events import register_socketio_handlers
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from api.v1.dependencies import get_uow_factory
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.message_service import MessageService
from domain.services.presence_registry import PresenceRegistry
from domain.services.realtime_gateway import RealtimeGateway
from infrastructure.auth.provider import IAuthProvider
from infrastructure.realtime.socketio_transport import SocketIOTransport

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    logger.info("application_started", environment=settings.app_env)
    yield
    gateway: RealtimeGateway = app.state.gateway
    online = len(gateway.registry)
    await gateway.shutdown()
    logger.info("application_stopped", dropped_connections=online)


def create_sio() -> socketio.AsyncServer:
    """Create the Socket.IO server."""
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.cors_origins_list,
        logger=False,
        engineio_logger=False,
    )


def create_gateway(
    sio: socketio.AsyncServer,
    uow_factory: Callable[[], IUnitOfWork],
    auth_provider: IAuthProvider,
) -> RealtimeGateway:
    """Build the realtime gateway and bind it to the Socket.IO server."""
    gateway = RealtimeGateway(
        registry=PresenceRegistry(),
        transport=SocketIOTransport(sio),
        auth_provider=auth_provider,
        uow_factory=uow_factory,
        message_service=MessageService(
            uow_factory, max_page_size=settings.message_page_size_max
        ),
        strict_channel_membership=settings.realtime_strict_channel_membership,
    )
    register_socketio_handlers(sio, gateway)
    return gateway


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Group Tasks & Chat\n\n"
            "Taskify lets users form groups, chat in real time and manage "
            "shared tasks with priority, status and assignees.\n\n"
            "### Authentication\n"
            "All endpoints except `/health` and `/api/v1/auth/*` require a "
            "session token in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n\n"
            "### Realtime\n"
            "Socket.IO is served at `/socket.io`; present the same token as "
            "`auth.token` when connecting.\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 30 requests/minute\n"
            "- POST/PATCH: 10 requests/minute"
        ),
        version="1.0.0",
        debug=settings.debug,
        contact={
            "name": "Taskify Support",
        },
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "auth",
                "description": "Signup, login and logout",
            },
            {
                "name": "users",
                "description": "Own profile and pending invitations",
            },
            {
                "name": "groups",
                "description": "Group and membership management",
            },
            {
                "name": "messages",
                "description": "Group chat history",
            },
            {
                "name": "tasks",
                "description": "Group task management",
            },
        ],
    )

    # Realtime
    sio = create_sio()
    app.state.sio = sio
    app.state.gateway = create_gateway(
        sio,
        get_uow_factory(),
        get_auth_provider(),
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


def create_asgi_app(app: FastAPI) -> socketio.ASGIApp:
    """Mount the Socket.IO server in front of the FastAPI app."""
    return socketio.ASGIApp(
        app.state.sio,
        other_asgi_app=app,
        socketio_path=settings.socketio_path,
    )


app = create_app()
application = create_asgi_app(app)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:application",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
