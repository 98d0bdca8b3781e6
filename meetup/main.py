import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from meetup.api.v1 import activities, auth, interests, notifications, users, websocket
from meetup.chat_protocol import ActivityChatProtocol
from meetup.config import Settings, settings as default_settings
from meetup.database import Database
from meetup.obs.logging import configure_logging
from meetup.repositories.interest_repository import InterestRepository
from meetup.websocket_manager import ConnectionManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    database = Database.from_settings(settings)
    await database.create_tables()
    if settings.SEED_INTEREST_CATEGORIES:
        async with database.session() as db:
            await InterestRepository(db).seed_defaults()

    manager = ConnectionManager()
    app.state.database = database
    app.state.connection_manager = manager
    app.state.chat_protocol = ActivityChatProtocol(
        database, manager, max_length=settings.MESSAGE_MAX_LENGTH
    )
    logger.info("application started", extra={"version": settings.VERSION})
    try:
        yield
    finally:
        await database.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Meetup Adventures API",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
    app.include_router(activities.router, prefix="/api/v1/activities", tags=["activities"])
    app.include_router(notifications.router, prefix="/api/v1/notifications", tags=["notifications"])
    app.include_router(interests.router, prefix="/api/v1/interests", tags=["interests"])
    app.include_router(websocket.router, tags=["websocket"])

    @app.get("/")
    async def root():
        return {"message": "Meetup Adventures API", "version": settings.VERSION}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
