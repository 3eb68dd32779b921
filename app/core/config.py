"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./invitation.db")
    USE_FIREBASE: bool = os.getenv("USE_FIREBASE", "false").lower() in ("1", "true", "yes")
    FIREBASE_CREDENTIALS_JSON: str | None = os.getenv("FIREBASE_CREDENTIALS_JSON")
    FIREBASE_CREDENTIALS_FILE: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    FIREBASE_CREDENTIALS_B64: str | None = os.getenv("FIREBASE_CREDENTIALS_B64")

    # Kakao OAuth
    KAKAO_API_KEY: str = os.getenv("KAKAO_API_KEY", "")
    KAKAO_REDIRECT_URI: str = os.getenv("KAKAO_REDIRECT_URI", "http://localhost:8080/api/members/kakao")
    KAKAO_AUTH_BASE_URL: str = "https://kauth.kakao.com"
    KAKAO_API_BASE_URL: str = "https://kapi.kakao.com"
    KAKAO_TIMEOUT_SECONDS: int = 10

    # Sessions
    SESSION_TOKEN_BYTES: int = 32

    # Event times are stored as naive wall-clock times in this zone
    EVENT_TIMEZONE: str = os.getenv("EVENT_TIMEZONE", "Asia/Seoul")

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]

    # Rate limiting (login callback)
    RATE_LIMIT_PER_MINUTE: int = 30

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    class Config:
        env_file = ".env"

settings = Settings()
