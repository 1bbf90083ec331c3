"""
Sharing Entities

Domain entity for public share links.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from .value_objects import ShareToken


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _parse_optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)


@dataclass
class ShareLink:
    """
    Entity representing a public link to a stored file.

    A link is revoked by clearing is_active and is never physically
    deleted. download_count only grows and is changed exclusively through
    the repository's atomic increment.
    """
    id: str
    file_id: str
    owner_id: str
    share_token: str
    created_at: datetime
    updated_at: datetime
    can_view: bool = True
    can_download: bool = True
    password_hash: Optional[str] = None
    expires_at: Optional[datetime] = None
    max_downloads: Optional[int] = None
    download_count: int = 0
    is_active: bool = True

    @classmethod
    def create(
        cls,
        file_id: str,
        owner_id: str,
        can_view: bool = True,
        can_download: bool = True,
        password_hash: Optional[str] = None,
        expires_at: Optional[datetime] = None,
        max_downloads: Optional[int] = None,
    ) -> "ShareLink":
        """
        Factory method to mint a new share link with a fresh token.

        Returns:
            New active ShareLink with download_count 0
        """
        now = datetime.utcnow()
        return cls(
            id=str(uuid.uuid4()),
            file_id=file_id,
            owner_id=owner_id,
            share_token=str(ShareToken.generate()),
            created_at=now,
            updated_at=now,
            can_view=can_view,
            can_download=can_download,
            password_hash=password_hash,
            expires_at=expires_at,
            max_downloads=max_downloads,
        )

    @property
    def is_password_protected(self) -> bool:
        return bool(self.password_hash)

    def is_owned_by(self, owner_id: str) -> bool:
        return self.owner_id == owner_id

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.utcnow()) >= self.expires_at

    def is_quota_exhausted(self) -> bool:
        if self.max_downloads is None:
            return False
        return self.download_count >= self.max_downloads

    def remaining_downloads(self) -> Optional[int]:
        if self.max_downloads is None:
            return None
        return max(0, self.max_downloads - self.download_count)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "file_id": self.file_id,
            "owner_id": self.owner_id,
            "share_token": self.share_token,
            "can_view": self.can_view,
            "can_download": self.can_download,
            "password_hash": self.password_hash,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "max_downloads": self.max_downloads,
            "download_count": self.download_count,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShareLink":
        """Create ShareLink from dictionary."""
        return cls(
            id=data["id"],
            file_id=data["file_id"],
            owner_id=data["owner_id"],
            share_token=data["share_token"],
            can_view=bool(data.get("can_view", True)),
            can_download=bool(data.get("can_download", True)),
            password_hash=data.get("password_hash") or None,
            expires_at=_parse_datetime(data.get("expires_at")),
            max_downloads=_parse_optional_int(data.get("max_downloads")),
            download_count=int(data.get("download_count", 0)),
            is_active=bool(data.get("is_active", True)),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data["updated_at"]),
        )
