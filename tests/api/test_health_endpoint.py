"""Unit tests for the health endpoint."""

from unittest.mock import MagicMock

from fastapi import FastAPI
from starlette.testclient import TestClient

from app.api.health import router


def _app():
    app = FastAPI()
    app.include_router(router, prefix="/api")
    return app


def test_health_reports_loaded_missions():
    app = _app()
    app.state.mission_context = MagicMock(loading=False)

    response = TestClient(app).get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "missions_loading": False}


def test_health_before_startup_reports_loading():
    response = TestClient(_app()).get("/api/health")

    assert response.json()["missions_loading"] is True
