"""
File Storage Entities

Domain entity for files stored with the remote asset service.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from ..errors import InvalidFileRequestError


MAX_NAME_LENGTH = 255


def _validate_name(name: str) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidFileRequestError("File name cannot be empty")
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidFileRequestError(
            f"File name cannot exceed {MAX_NAME_LENGTH} characters"
        )
    if "/" in name or "\\" in name:
        raise InvalidFileRequestError("File name cannot contain path separators")
    return name


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class StoredFile:
    """
    Entity representing a user's file and its thumbnail.

    The thumbnail asset id and URL are always set together. A fallback
    thumbnail points at the original asset with a preview URL and never
    replaces a converted one.
    """
    id: str
    owner_id: str
    name: str
    size: int
    format: str
    mime_type: str
    remote_asset_id: str
    url: str
    created_at: datetime
    updated_at: datetime
    thumbnail_asset_id: Optional[str] = None
    thumbnail_url: Optional[str] = None
    thumbnail_is_fallback: bool = False
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        owner_id: str,
        name: str,
        size: int,
        format: str,
        mime_type: str,
        remote_asset_id: str,
        url: str,
    ) -> "StoredFile":
        """
        Factory method to create a new stored file.

        Args:
            owner_id: Owner user id
            name: Display name
            size: Size in bytes
            format: Lowercase format tag
            mime_type: MIME type of the content
            remote_asset_id: Asset id in the remote store
            url: Delivery URL of the original

        Returns:
            New StoredFile with a generated id
        """
        now = datetime.utcnow()
        return cls(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            name=_validate_name(name),
            size=size,
            format=format,
            mime_type=mime_type,
            remote_asset_id=remote_asset_id,
            url=url,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_pdf(self) -> bool:
        return self.format == "pdf"

    def is_owned_by(self, owner_id: str) -> bool:
        return self.owner_id == owner_id

    def has_thumbnail(self) -> bool:
        return self.thumbnail_asset_id is not None and self.thumbnail_url is not None

    def has_converted_thumbnail(self) -> bool:
        return self.has_thumbnail() and not self.thumbnail_is_fallback

    def apply_converted_thumbnail(self, asset_id: str, url: str) -> None:
        """Record a thumbnail produced by document conversion."""
        if not asset_id or not url:
            raise ValueError("Converted thumbnail requires both asset id and url")
        self.thumbnail_asset_id = asset_id
        self.thumbnail_url = url
        self.thumbnail_is_fallback = False
        self.updated_at = datetime.utcnow()

    def apply_fallback_thumbnail(self, preview_url: str) -> bool:
        """
        Record a preview of the original asset as the thumbnail.

        Returns:
            False if a converted thumbnail is already present and was kept
        """
        if self.has_converted_thumbnail():
            return False
        if not preview_url:
            raise ValueError("Fallback thumbnail requires a preview url")
        self.thumbnail_asset_id = self.remote_asset_id
        self.thumbnail_url = preview_url
        self.thumbnail_is_fallback = True
        self.updated_at = datetime.utcnow()
        return True

    def clear_thumbnail(self) -> None:
        self.thumbnail_asset_id = None
        self.thumbnail_url = None
        self.thumbnail_is_fallback = False

    def rename(self, new_name: str) -> None:
        self.name = _validate_name(new_name)
        self.updated_at = datetime.utcnow()

    def trash(self) -> None:
        """Soft delete the file."""
        now = datetime.utcnow()
        self.is_deleted = True
        self.deleted_at = now
        self.updated_at = now

    def restore(self) -> None:
        """Bring a trashed file back."""
        self.is_deleted = False
        self.deleted_at = None
        self.updated_at = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "name": self.name,
            "size": self.size,
            "format": self.format,
            "mime_type": self.mime_type,
            "remote_asset_id": self.remote_asset_id,
            "url": self.url,
            "thumbnail_asset_id": self.thumbnail_asset_id,
            "thumbnail_url": self.thumbnail_url,
            "thumbnail_is_fallback": self.thumbnail_is_fallback,
            "is_deleted": self.is_deleted,
            "deleted_at": self.deleted_at.isoformat() if self.deleted_at else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredFile":
        """Create StoredFile from dictionary."""
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            name=data["name"],
            size=int(data["size"]),
            format=data["format"],
            mime_type=data["mime_type"],
            remote_asset_id=data["remote_asset_id"],
            url=data["url"],
            thumbnail_asset_id=data.get("thumbnail_asset_id"),
            thumbnail_url=data.get("thumbnail_url"),
            thumbnail_is_fallback=bool(data.get("thumbnail_is_fallback", False)),
            is_deleted=bool(data.get("is_deleted", False)),
            deleted_at=_parse_datetime(data.get("deleted_at")),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
