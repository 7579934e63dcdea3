"""Application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import settings
from app.core.initializer import shutdown_handler, startup_handler
from app.core.set_middleware import setup_middleware
from app.core.set_routes import setup_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan"""
    await startup_handler(app)
    yield
    await shutdown_handler(app)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    app = FastAPI(
        title=settings.APP_TITLE,
        description=settings.APP_DESCRIPTION,
        lifespan=lifespan,
    )

    # Setup middleware
    setup_middleware(app)

    # Setup routes
    setup_routes(app)

    return app
