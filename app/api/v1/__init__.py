from fastapi import APIRouter

from .routes.mission import router as mission_router

router = APIRouter()

router.include_router(mission_router, prefix="/missions", tags=["missions"])
