"""
Uploadcare and Conversion Configuration

Settings for the remote asset service and the thumbnail pipeline, read
from environment variables at construction.
"""

import os


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


class UploadcareConfig:
    """Uploadcare credentials and endpoints."""

    def __init__(self):
        self.public_key = os.getenv("UPLOADCARE_PUBLIC_KEY", "")
        self.secret_key = os.getenv("UPLOADCARE_SECRET_KEY", "")
        self.api_base = os.getenv("UPLOADCARE_API_BASE", "https://api.uploadcare.com").rstrip("/")
        self.upload_base = os.getenv("UPLOADCARE_UPLOAD_BASE", "https://upload.uploadcare.com").rstrip("/")
        self.cdn_base = os.getenv("UPLOADCARE_CDN_BASE", "https://ucarecdn.com").rstrip("/")
        self.request_timeout = _env_float("UPLOADCARE_REQUEST_TIMEOUT", 15.0)

    @property
    def is_configured(self) -> bool:
        return bool(self.public_key and self.secret_key)


class ConversionConfig:
    """
    Polling budgets for the thumbnail pipeline.

    The conversion budget is larger than the readiness budget because the
    conversion itself is slower than making a stored file servable.
    """

    def __init__(self):
        self.readiness_timeout = _env_float("READINESS_TIMEOUT_SECONDS", 30.0)
        self.readiness_interval = _env_float("READINESS_POLL_INTERVAL_SECONDS", 1.0)
        self.conversion_timeout = _env_float("CONVERSION_TIMEOUT_SECONDS", 60.0)
        self.conversion_interval = _env_float("CONVERSION_POLL_INTERVAL_SECONDS", 2.0)
        self.preview_size = _env_int("FALLBACK_PREVIEW_SIZE", 300)
        self.retry_batch_size = _env_int("THUMBNAIL_RETRY_BATCH_SIZE", 20)
