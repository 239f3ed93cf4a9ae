"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./wedding_seating.db")
    USE_FIREBASE: bool = os.getenv("USE_FIREBASE", "false").lower() in ("1", "true", "yes")
    FIREBASE_CREDENTIALS_JSON: str | None = os.getenv("FIREBASE_CREDENTIALS_JSON")
    FIREBASE_CREDENTIALS_FILE: str | None = os.getenv("FIREBASE_CREDENTIALS_FILE")
    FIREBASE_CREDENTIALS_B64: str | None = os.getenv("FIREBASE_CREDENTIALS_B64")

    # Security
    API_TOKEN: str = os.getenv("API_TOKEN", "seating_token_123")

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Seat geometry (canvas pixels)
    SEAT_GAP: float = 20
    EDGE_OFFSET: float = 18
    CORNER_CLEAR: float = 12

    # Persistence
    SAVE_DEBOUNCE_SECONDS: float = 0.1
    SAVED_STATUS_RESET_SECONDS: float = 2.0
    ERROR_STATUS_RESET_SECONDS: float = 3.0

    class Config:
        env_file = ".env"

settings = Settings()
