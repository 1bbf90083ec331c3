"""
Domain Events

Immutable records of significant state changes in the domain.
Events decouple side effects (logging, auditing) from core business logic.
"""

from abc import ABC
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Attributes:
        aggregate_id: ID of the aggregate that generated the event (file or share id)
        occurred_at: Timestamp when the event occurred
    """
    aggregate_id: str
    occurred_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to dictionary for serialization.

        Returns:
            Dictionary representation of the event
        """
        return {
            "event_type": self.__class__.__name__,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
        }


# ============================================================================
# File events
# ============================================================================

@dataclass(frozen=True)
class FileUploadedEvent(DomainEvent):
    """
    Event emitted when a file has been uploaded and registered.

    Attributes:
        owner_id: Owner of the file
        name: Original file name
        size: Size in bytes
        mime_type: Declared MIME type
    """
    owner_id: str
    name: str
    size: int
    mime_type: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization."""
        base_dict = super().to_dict()
        base_dict.update({
            "owner_id": self.owner_id,
            "name": self.name,
            "size": self.size,
            "mime_type": self.mime_type,
        })
        return base_dict


@dataclass(frozen=True)
class FileTrashedEvent(DomainEvent):
    """Event emitted when a file is moved to the trash."""
    owner_id: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict["owner_id"] = self.owner_id
        return base_dict


@dataclass(frozen=True)
class FileRestoredEvent(DomainEvent):
    """Event emitted when a file is restored from the trash."""
    owner_id: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict["owner_id"] = self.owner_id
        return base_dict


@dataclass(frozen=True)
class FileDeletedEvent(DomainEvent):
    """
    Event emitted when a file is permanently deleted.

    Attributes:
        owner_id: Owner of the file
        reason: "user" for explicit deletes, "retention" for trash purges
    """
    owner_id: str
    reason: str = "user"

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "owner_id": self.owner_id,
            "reason": self.reason,
        })
        return base_dict


# ============================================================================
# Thumbnail events
# ============================================================================

@dataclass(frozen=True)
class ThumbnailGeneratedEvent(DomainEvent):
    """
    Event emitted when a PDF's first page was converted into a thumbnail.

    Attributes:
        thumbnail_asset_id: Asset id of the converted image
        thumbnail_url: Public URL of the converted image
    """
    thumbnail_asset_id: str
    thumbnail_url: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "thumbnail_asset_id": self.thumbnail_asset_id,
            "thumbnail_url": self.thumbnail_url,
        })
        return base_dict


@dataclass(frozen=True)
class ThumbnailFallbackEvent(DomainEvent):
    """
    Event emitted when conversion failed and a preview URL was used instead.

    Attributes:
        reason: Short description of the conversion failure
    """
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict["reason"] = self.reason
        return base_dict


@dataclass(frozen=True)
class ThumbnailSkippedEvent(DomainEvent):
    """Event emitted when neither conversion nor fallback produced a thumbnail."""
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict["reason"] = self.reason
        return base_dict


# ============================================================================
# Share link events
# ============================================================================

@dataclass(frozen=True)
class ShareLinkCreatedEvent(DomainEvent):
    """
    Event emitted when a new share link is created.

    Attributes:
        file_id: Shared file
        owner_id: Owner of the file and the link
    """
    file_id: str
    owner_id: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "file_id": self.file_id,
            "owner_id": self.owner_id,
        })
        return base_dict


@dataclass(frozen=True)
class ShareLinkUpdatedEvent(DomainEvent):
    """
    Event emitted when share link settings change.

    Attributes:
        changed_fields: Names of the fields present in the patch
    """
    changed_fields: tuple

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict["changed_fields"] = list(self.changed_fields)
        return base_dict


@dataclass(frozen=True)
class ShareLinkRevokedEvent(DomainEvent):
    """Event emitted when a share link is deactivated."""
    file_id: str

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict["file_id"] = self.file_id
        return base_dict


@dataclass(frozen=True)
class SharedFileDownloadedEvent(DomainEvent):
    """
    Event emitted when a download through a share link is counted.

    Attributes:
        download_count: Counter value after the increment
        max_downloads: Quota of the link, None when unlimited
    """
    download_count: int
    max_downloads: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        base_dict = super().to_dict()
        base_dict.update({
            "download_count": self.download_count,
            "max_downloads": self.max_downloads,
        })
        return base_dict


@dataclass(frozen=True)
class SharePasswordFailedEvent(DomainEvent):
    """Event emitted when a wrong password is supplied for a share link."""
    pass
