from fastapi import FastAPI

from app.api import router as api_router
from app.core.config import settings


def setup_routes(app: FastAPI) -> None:
    """Mount the health and mission routers under the API prefix"""
    app.include_router(api_router, prefix=settings.API_PREFIX)
