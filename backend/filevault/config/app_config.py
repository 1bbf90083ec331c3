"""
Application Configuration

Flask-level settings read from environment variables.
"""

import os

from ..domain.file_storage.value_objects import MAX_FILE_SIZE
from .uploadcare_config import _env_int


class AppConfig:
    """Application configuration."""

    def __init__(self):
        self.api_version = os.getenv("API_VERSION", "v1")
        self.flask_env = os.getenv("FLASK_ENV", "development")
        self.is_production = self.flask_env == "production"

        self.max_upload_size = _env_int("MAX_UPLOAD_SIZE", MAX_FILE_SIZE)
        self.trash_retention_days = _env_int("TRASH_RETENTION_DAYS", 30)

        self.jwt_secret = os.getenv("JWT_SECRET", "")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.frontend_url = os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/")
        self.cors_origins = os.getenv("CORS_ORIGINS", "*")

        if self.is_production and not self.jwt_secret:
            raise ValueError("JWT_SECRET must be set in production")
