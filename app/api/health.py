from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Liveness check, also reporting whether the mission cache is still loading."""
    mission_context = getattr(request.app.state, "mission_context", None)
    return {
        "status": "ok",
        "missions_loading": mission_context.loading if mission_context else True,
    }
