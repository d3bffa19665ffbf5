import logging

logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from anytime.config import get_settings
from anytime.controllers.availability import router as availability_router
from anytime.controllers.events import router as events_router
from anytime.controllers.health import router as health_router
from anytime.controllers.participants import router as participants_router
from anytime.controllers.usage import router as usage_router
from anytime.controllers.ws_events import router as ws_events_router
from anytime.errors import register_exception_handlers
from anytime.lifespan import cleanup_resources, setup_resources
from anytime.middleware import HTTPLogMiddleware

logger = logging.getLogger("anytime")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    resources = await setup_resources()
    logger.info(
        "Anytime API started (realtime=%s, database=%s)",
        resources.event_bus is not None,
        resources.db_enabled,
    )
    try:
        yield
    finally:
        await cleanup_resources(resources)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Anytime API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors.origins,
        allow_origin_regex=settings.cors.origins_regex or None,
        allow_credentials=settings.cors.allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.debug.request:
        logging.getLogger("anytime.http").setLevel(logging.DEBUG)
        app.add_middleware(HTTPLogMiddleware)

    if settings.debug.websocket:
        logging.getLogger("anytime.ws.events").setLevel(logging.DEBUG)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(events_router)
    app.include_router(participants_router)
    app.include_router(availability_router)
    app.include_router(usage_router)
    app.include_router(ws_events_router)
    return app


app = create_app()
