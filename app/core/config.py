import os

from dotenv import load_dotenv
from pydantic_settings import BaseSettings


load_dotenv()


def _read_secret(env_var: str, default: str = "") -> str:
    """Read secret from environment variable or file path (for Cloud Run secrets)"""
    value = os.getenv(env_var, default)

    # If value looks like a file path and exists, read the file
    # This handles Cloud Run's --set-secrets behavior
    if value and os.path.exists(value):
        try:
            with open(value) as f:
                return f.read().strip()
        except Exception:
            return default

    return value


class Settings(BaseSettings):
    APP_TITLE: str = "mission-tracker-api"
    APP_DESCRIPTION: str = "API for weekly unit missions and their fulfillment"
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"

    # Default to localhost only for security - set proper origins in production
    ALLOW_ORIGINS: str = _read_secret(
        "ALLOW_ORIGINS", "http://localhost:5173,http://localhost:8080"
    )

    # Firebase - credentials file path or inline JSON
    GOOGLE_APPLICATION_CREDENTIALS: str = os.getenv(
        "GOOGLE_APPLICATION_CREDENTIALS", "firebase_key.json"
    )

    # Firestore
    FIRESTORE_DATABASE_ID: str = "(default)"
    MISSIONS_COLLECTION: str = "missions"
    UNITS_COLLECTION: str = "units"

    def __repr__(self):
        """Override __repr__ to prevent logging sensitive information"""
        return f"Settings(APP_TITLE='{self.APP_TITLE}', HOST='{self.HOST}', PORT={self.PORT})"

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.ALLOW_ORIGINS.split(",")]

    class Config:
        case_sensitive = True


settings = Settings()
