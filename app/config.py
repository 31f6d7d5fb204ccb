"""
App Config - 서비스 설정

Club manager settings loaded from environment / .env
"""
import os
from typing import List
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    """Service settings"""

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3001"))
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Entity store: "memory" or "supabase"
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "memory")
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")
    STORE_TIMEOUT_SECONDS: int = Field(default=10, description="store request timeout (seconds)")

    # JWT
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "your-secret-key-change-in-production")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12  # 12시간

    # Admin-tier credentials (static verifier); unset means no admin login
    ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")
    SUPERADMIN_USERNAME: str = os.getenv("SUPERADMIN_USERNAME", "")
    SUPERADMIN_PASSWORD: str = os.getenv("SUPERADMIN_PASSWORD", "")

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
