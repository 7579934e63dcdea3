"""Middleware registration"""

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.middleware.firebase_middleware import FirebaseAuthMiddleware


def setup_middleware(app: FastAPI) -> None:
    """Register all application middleware"""

    # Firebase ID token authentication, runs inside CORS
    app.add_middleware(FirebaseAuthMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
