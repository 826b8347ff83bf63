"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database - when unset the per-tenant file store is authoritative
    DATABASE_URL: str | None = os.getenv("DATABASE_URL")

    # File backend
    DATA_DIR: str = os.getenv("DATA_DIR", "./data")
    ATOMIC_REWRITE: bool = os.getenv("ATOMIC_REWRITE", "false").lower() in ("1", "true", "yes")
    LOCK_WRITES: bool = os.getenv("LOCK_WRITES", "false").lower() in ("1", "true", "yes")

    # Tenancy
    DEFAULT_TENANT_ID: str = "default"

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30

    class Config:
        env_file = ".env"

settings = Settings()
