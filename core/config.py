"""
POSTURECOACH Configuration

Environment variables and application settings.
Posture thresholds are domain constants and live in
posture_service/models/constants.py, not here.
"""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "POSTURECOACH"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    # Pose detection backend: "mediapipe" or "synthetic"
    POSE_DETECTOR: str = "mediapipe"
    SYNTHETIC_SEED: int = 0

    # Uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE_MB: int = 100

    # Video analysis
    VIDEO_SAMPLE_FRAMES: int = 30
    VIDEO_DEFAULT_FPS: float = 30.0

    # Thread Pool
    THREAD_POOL_SIZE: int = 4

    # Static client build (production)
    SERVE_CLIENT_BUILD: bool = False
    CLIENT_BUILD_DIR: str = "../client/build"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
