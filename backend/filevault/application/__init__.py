"""
Application Layer

Services that coordinate domain services, publish events and shape API
payloads.
"""

from .dependency_container import DependencyContainer, DependencyNotFoundError
from .event_publisher import EventPublisher
from .file_service import FileService, serialize_file, serialize_page
from .share_service import ShareService
from .thumbnail_result import ThumbnailResult, ThumbnailStatus
from .thumbnail_service import ThumbnailService

__all__ = [
    "DependencyContainer",
    "DependencyNotFoundError",
    "EventPublisher",
    "FileService",
    "ShareService",
    "ThumbnailResult",
    "ThumbnailService",
    "ThumbnailStatus",
    "serialize_file",
    "serialize_page",
]
