# app/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import validator
from typing import Dict, List


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: str = "sqlite+aiosqlite:///./hr_ledger.db"

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and ("localhost" in v or v.startswith("sqlite")):
            raise ValueError("🚨 Production environment cannot use a local database!")
        return v

    # === JWT ===
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["http://localhost:8083", "http://127.0.0.1:8083"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"
    TIMEZONE: str = "Asia/Dhaka"

    # === Business Rules ===
    DEFAULT_CHECK_IN: str = "09:00:00"
    DEFAULT_CHECK_OUT: str = "18:00:00"
    DEFAULT_LEAVE_ALLOCATIONS: Dict[str, float] = {
        "Sick Leave": 12,
        "Casual Leave": 12,
        "Earned Leave": 15,
        "Compensatory Off": 0,
        "Maternity Leave": 180,
        "Paternity Leave": 7,
        "Bereavement Leave": 5,
        "Unpaid Leave": 999,  # effectively unlimited
    }
    EXTRA_LEAVE_REQUIRES_ELEVATED_APPROVAL: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create a global settings instance
settings = Settings()
