"""Mission dependencies for route handlers"""

from fastapi import Request

from app.services.mission_context import MissionContext


def get_mission_context(request: Request) -> MissionContext:
    """FastAPI dependency to get the mission cache owned by the application"""
    return request.app.state.mission_context
