import logging

from fastapi import Request
from firebase_admin import auth
from firebase_admin.auth import (
    ExpiredIdTokenError,
    InvalidIdTokenError,
    RevokedIdTokenError,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from app.core.config import settings
from app.models.user import User

logger = logging.getLogger(__name__)

EXCLUDED_PATHS = {f"{settings.API_PREFIX}/health", "/docs", "/openapi.json", "/redoc"}


def user_from_claims(decoded_token: dict) -> User:
    """Build the acting user from a verified ID token.

    Unit membership and the admin flag are Firebase custom claims.
    """
    return User(
        id=decoded_token["uid"],
        name=decoded_token.get("name"),
        email=decoded_token.get("email"),
        unit_id=decoded_token.get("unit_id"),
        is_admin=bool(decoded_token.get("admin", False)),
    )


class FirebaseAuthMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS" or request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Missing Authorization header",
                    "error_code": "TOKEN_MISSING",
                },
            )

        try:
            scheme, token = auth_header.split(" ")
            if scheme.lower() != "bearer":
                return JSONResponse(
                    status_code=401,
                    content={
                        "detail": "Invalid auth scheme",
                        "error_code": "INVALID_SCHEME",
                    },
                )
        except ValueError:
            return JSONResponse(
                status_code=401,
                content={
                    "detail": "Malformed Authorization header",
                    "error_code": "MALFORMED_HEADER",
                },
            )

        try:
            decoded_token = auth.verify_id_token(token)
            request.state.current_user = user_from_claims(decoded_token)
        except ExpiredIdTokenError:
            return JSONResponse(
                status_code=401,
                content={"detail": "Token expired", "error_code": "TOKEN_EXPIRED"},
            )
        except RevokedIdTokenError:
            return JSONResponse(
                status_code=401,
                content={"detail": "Token revoked", "error_code": "TOKEN_REVOKED"},
            )
        except InvalidIdTokenError:
            return JSONResponse(
                status_code=401,
                content={"detail": "Invalid token", "error_code": "TOKEN_INVALID"},
            )
        except Exception as e:
            logger.exception("ID token verification failed")
            return JSONResponse(
                status_code=500,
                content={
                    "detail": f"Internal server error: {str(e)}",
                    "error_code": "INTERNAL_ERROR",
                },
            )

        return await call_next(request)
