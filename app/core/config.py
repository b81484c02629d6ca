"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

GUEST_STORES = ("sql", "sheets", "firestore")

class Settings(BaseSettings):
    """Application settings"""

    # Guest directory backend: sql, sheets or firestore
    GUEST_STORE: str = os.getenv("GUEST_STORE", "sql")

    # Server
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./wedding_rsvp.db")

    # Google Apps Script web app backing the guest spreadsheet
    GUEST_API_URL: str = os.getenv("GUEST_API_URL", "")
    GUEST_API_TIMEOUT: float = float(os.getenv("GUEST_API_TIMEOUT", "15"))

    # Firestore
    FIREBASE_CREDENTIALS_JSON: str | None = os.getenv("FIREBASE_CREDENTIALS_JSON")
    FIREBASE_CREDENTIALS_FILE: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    FIREBASE_CREDENTIALS_B64: str | None = os.getenv("FIREBASE_CREDENTIALS_B64")
    FIRESTORE_COLLECTION: str = os.getenv("FIRESTORE_COLLECTION", "guests")

    # Security
    ADMIN_TOKEN: str = os.getenv("ADMIN_TOKEN", "admin_token_123")

    # Guest matching
    MATCH_THRESHOLD: float = 90.0
    MIN_QUERY_LENGTH: int = 3

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # File limits
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30

    class Config:
        env_file = ".env"

settings = Settings()
