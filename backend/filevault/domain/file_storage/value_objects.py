"""
File Storage Value Objects

Immutable value objects for upload validation and listing pagination.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, TypeVar

from ..errors import InvalidFileRequestError, UnsupportedFileTypeError


MAX_FILE_SIZE = 5 * 1024 * 1024

# MIME type -> lowercase format tag
ALLOWED_MIME_TYPES: Dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/avif": "avif",
    "image/heic": "heic",
    "image/heif": "heif",
    "image/heic-sequence": "heic-sequence",
    "image/heif-sequence": "heif-sequence",
    "image/gif": "gif",
    "text/plain": "txt",
    "text/csv": "csv",
    "text/tab-separated-values": "tsv",
    "application/pdf": "pdf",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-powerpoint": "ppt",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "pptx",
}


@dataclass(frozen=True)
class FileFormat:
    """
    Value object for the lowercase format tag of a stored file.

    Only MIME types from ALLOWED_MIME_TYPES can be turned into a format.
    """
    value: str

    @classmethod
    def from_mime_type(cls, mime_type: str) -> "FileFormat":
        """
        Derive the format tag from a MIME type.

        Raises:
            UnsupportedFileTypeError: If the MIME type is not allowed
        """
        normalized = (mime_type or "").split(";")[0].strip().lower()
        tag = ALLOWED_MIME_TYPES.get(normalized)
        if tag is None:
            raise UnsupportedFileTypeError(f"File type {mime_type} is not allowed")
        return cls(tag)

    @property
    def is_pdf(self) -> bool:
        return self.value == "pdf"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PageRequest:
    """Validated page number and size for listing endpoints."""
    page: int = 1
    limit: int = 10

    MAX_LIMIT = 100

    def __post_init__(self):
        if not isinstance(self.page, int) or self.page < 1:
            raise InvalidFileRequestError(f"Page must be a positive integer, got {self.page}")
        if not isinstance(self.limit, int) or not 1 <= self.limit <= self.MAX_LIMIT:
            raise InvalidFileRequestError(
                f"Limit must be between 1 and {self.MAX_LIMIT}, got {self.limit}"
            )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


T = TypeVar("T")


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """One page of results plus the total number of matches."""
    items: List[T]
    total: int
    request: PageRequest = field(default_factory=PageRequest)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.request.limit) if self.total else 0

    def pagination(self) -> Dict[str, Any]:
        """Pagination block in the shape returned by listing endpoints."""
        return {
            "currentPage": self.request.page,
            "totalPages": self.total_pages,
            "totalFiles": self.total,
            "hasNextPage": self.request.page < self.total_pages,
            "hasPrevPage": self.request.page > 1,
            "limit": self.request.limit,
        }
