"""
File Storage Domain

Handles stored file metadata, upload validation, trash and cleanup.
"""

from .blob_store import IBlobStore, StoredBlob
from .entities import StoredFile
from .repositories import FileRepository
from .services import FileManager
from .value_objects import (
    ALLOWED_MIME_TYPES,
    MAX_FILE_SIZE,
    FileFormat,
    PageRequest,
    PageResult,
)

__all__ = [
    "ALLOWED_MIME_TYPES",
    "MAX_FILE_SIZE",
    "FileFormat",
    "FileManager",
    "FileRepository",
    "IBlobStore",
    "PageRequest",
    "PageResult",
    "StoredBlob",
    "StoredFile",
]
