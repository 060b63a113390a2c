from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "ADMG Condominium API"
    ENV: str = "development"

    # -------------------------------------------------
    # Database
    # -------------------------------------------------
    DATABASE_URL: str = "sqlite:///./local.db"

    # -------------------------------------------------
    # Frontend + CORS
    # -------------------------------------------------
    CORS_ORIGIN: str = "*"
    APP_BASE_URL: Optional[str] = None

    # Built below from CORS_ORIGIN
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # JWT / Sessions
    # -------------------------------------------------
    JWT_SECRET_KEY: str = "dev_secret"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    STATE_TOKEN_EXPIRE_MINUTES: int = 10

    # -------------------------------------------------
    # Local credentials
    # -------------------------------------------------
    EMAIL_VERIFY_TTL_HOURS: int = 24
    PASSWORD_RESET_TTL_MINUTES: int = 60
    MIN_PASSWORD_LENGTH: int = 8

    # -------------------------------------------------
    # Login rate limiting
    # -------------------------------------------------
    LOGIN_RATE_LIMIT_MAX_ATTEMPTS: int = Field(10, description="Attempts allowed per window per (ip, email)")
    LOGIN_RATE_LIMIT_WINDOW_SECONDS: int = Field(15 * 60, description="Fixed window length in seconds")
    RATE_LIMIT_BACKEND: str = Field("memory", description="'memory' (single instance) or 'redis' (shared)")
    REDIS_URL: Optional[str] = None

    # -------------------------------------------------
    # Google OAuth
    # -------------------------------------------------
    GOOGLE_CLIENT_ID: Optional[str] = None
    GOOGLE_CLIENT_SECRET: Optional[str] = None
    GOOGLE_REDIRECT_URI: Optional[str] = None

    # -------------------------------------------------
    # SMTP Email Notifications
    # -------------------------------------------------
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: Optional[int] = None
    SMTP_USER: Optional[str] = None
    SMTP_PASS: Optional[str] = None

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list + app base URL after loading settings
# -------------------------------------------------
cors_origins = [o.strip().rstrip("/") for o in settings.CORS_ORIGIN.split(",") if o.strip()]
settings.BACKEND_CORS_ORIGINS = cors_origins or ["*"]

if not settings.APP_BASE_URL:
    if settings.BACKEND_CORS_ORIGINS != ["*"]:
        settings.APP_BASE_URL = settings.BACKEND_CORS_ORIGINS[0]
    else:
        settings.APP_BASE_URL = "http://localhost:5173"
settings.APP_BASE_URL = settings.APP_BASE_URL.rstrip("/")
