from contextlib import asynccontextmanager

from fastapi import FastAPI

from friendgraph.core.config import get_settings
from friendgraph.core.errors import register_error_handlers
from friendgraph.core.logging_config import setup_logging
from friendgraph.database.connection import close_mongo_connection, connect_to_mongo
from friendgraph.routers.auth import router as auth_router
from friendgraph.routers.friends import router as friends_router


@asynccontextmanager
async def lifespan(app: FastAPI):

    await connect_to_mongo()
    try:
        yield
    finally:
        await close_mongo_connection()


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title=settings.project_name, lifespan=lifespan)
    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(friends_router)

    @app.get("/")
    async def root():
        return {"status": "ok"}

    return app


app = create_app()
