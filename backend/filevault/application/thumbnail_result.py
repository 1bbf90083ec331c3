"""
Thumbnail Result Value Object

Outcome of one run of the thumbnail pipeline for a file.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..domain.errors import ErrorCategory


class ThumbnailStatus(Enum):
    CONVERTED = "converted"
    FALLBACK = "fallback"
    EXISTING = "existing"
    NOT_PDF = "not_pdf"
    NONE = "none"


@dataclass(frozen=True)
class ThumbnailResult:
    """
    Result of attaching a thumbnail to a file.

    Attributes:
        status: What the pipeline ended with
        thumbnail_url: URL stored on the file, if any
        error_message: Conversion failure that led to a fallback or to no thumbnail
        error_category: Category of that failure
    """
    status: ThumbnailStatus
    thumbnail_url: Optional[str] = None
    error_message: Optional[str] = None
    error_category: Optional[ErrorCategory] = None

    @property
    def changed(self) -> bool:
        """True when the file's thumbnail fields were modified."""
        return self.status in (ThumbnailStatus.CONVERTED, ThumbnailStatus.FALLBACK)
