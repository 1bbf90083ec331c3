"""
Share Service

Application service behind the /share endpoints. Wraps ShareLinkManager,
publishes share events and shapes owner and public payloads.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..domain.errors import PasswordIncorrectError
from ..domain.events import (
    SharedFileDownloadedEvent,
    ShareLinkCreatedEvent,
    ShareLinkRevokedEvent,
    ShareLinkUpdatedEvent,
    SharePasswordFailedEvent,
)
from ..domain.file_storage.entities import StoredFile
from ..domain.sharing.entities import ShareLink
from ..domain.sharing.services import SharedFileAccess, ShareLinkManager
from ..domain.sharing.value_objects import ShareDefaults, ShareLinkPatch
from .event_publisher import EventPublisher

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class ShareService:
    """Application service for share link management and public access."""

    def __init__(
        self,
        share_manager: ShareLinkManager,
        frontend_url: str = "http://localhost:3000",
        event_publisher: Optional[EventPublisher] = None,
    ):
        """
        Initialize ShareService.

        Args:
            share_manager: Domain service for share links
            frontend_url: Base URL of the web client that renders share pages
            event_publisher: Optional publisher for share events
        """
        self.share_manager = share_manager
        self.frontend_url = frontend_url.rstrip("/")
        self.event_publisher = event_publisher

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def create_link(
        self,
        file_id: str,
        owner_id: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Get or create the share link for a file.

        Options only apply when a new link is minted.

        Returns:
            Tuple of (owner payload, created)
        """
        defaults = self._defaults_from(options or {})
        link, created = self.share_manager.get_or_create(file_id, owner_id, defaults)
        if created:
            self._publish(ShareLinkCreatedEvent(
                aggregate_id=link.id,
                occurred_at=datetime.utcnow(),
                file_id=file_id,
                owner_id=owner_id,
            ))
        file = self.share_manager.file_repo.get(file_id)
        return self.owner_payload(link, file), created

    def update_link(self, share_id: str, owner_id: str, body: Dict[str, Any]) -> Dict[str, Any]:
        patch = ShareLinkPatch.from_request(body)
        link = self.share_manager.update(share_id, owner_id, patch)
        self._publish(ShareLinkUpdatedEvent(
            aggregate_id=link.id,
            occurred_at=datetime.utcnow(),
            changed_fields=patch.changed_fields(),
        ))
        return self.owner_payload(link, self.share_manager.file_repo.get(link.file_id))

    def revoke_link(self, share_id: str, owner_id: str) -> None:
        link = self.share_manager.revoke(share_id, owner_id)
        self._publish(ShareLinkRevokedEvent(
            aggregate_id=link.id,
            occurred_at=datetime.utcnow(),
            file_id=link.file_id,
        ))

    def list_links(self, owner_id: str) -> List[Dict[str, Any]]:
        links = self.share_manager.list_for_owner(owner_id)
        return [
            self.owner_payload(link, self.share_manager.file_repo.get(link.file_id))
            for link in links
        ]

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def get_shared(self, share_token: str) -> Dict[str, Any]:
        """
        Public read of a share link.

        Returns the reduced payload without any content URL when the link
        is password protected.
        """
        access = self.share_manager.resolve(share_token)
        if not access.decision.is_granted:
            return self.reduced_payload(access)
        return self.public_payload(access)

    def verify_password(self, share_token: str, password: Optional[str]) -> Dict[str, Any]:
        try:
            access = self.share_manager.verify_password(share_token, password)
        except PasswordIncorrectError:
            link = self.share_manager.share_repo.get_by_token(share_token)
            if link is not None:
                self._publish(SharePasswordFailedEvent(
                    aggregate_id=link.id, occurred_at=datetime.utcnow()
                ))
            raise
        return self.public_payload(access)

    def download(self, share_token: str, password: Optional[str] = None) -> str:
        """
        Count a shared download.

        Returns:
            Content URL to redirect to
        """
        try:
            access = self.share_manager.record_download(share_token, password)
        except PasswordIncorrectError:
            link = self.share_manager.share_repo.get_by_token(share_token)
            if link is not None:
                self._publish(SharePasswordFailedEvent(
                    aggregate_id=link.id, occurred_at=datetime.utcnow()
                ))
            raise

        self._publish(SharedFileDownloadedEvent(
            aggregate_id=access.link.id,
            occurred_at=datetime.utcnow(),
            download_count=access.link.download_count,
            max_downloads=access.link.max_downloads,
        ))
        return access.file.url

    # ------------------------------------------------------------------
    # Payloads
    # ------------------------------------------------------------------

    def share_url(self, link: ShareLink) -> str:
        return f"{self.frontend_url}/share/{link.share_token}"

    def owner_payload(self, link: ShareLink, file: Optional[StoredFile]) -> Dict[str, Any]:
        payload = {
            "id": link.id,
            "shareToken": link.share_token,
            "shareUrl": self.share_url(link),
            "canView": link.can_view,
            "canDownload": link.can_download,
            "hasPassword": link.is_password_protected,
            "expiresAt": _iso(link.expires_at),
            "maxDownloads": link.max_downloads,
            "downloadCount": link.download_count,
            "isActive": link.is_active,
            "createdAt": _iso(link.created_at),
            "updatedAt": _iso(link.updated_at),
        }
        if file is not None:
            payload["file"] = {
                "id": file.id,
                "name": file.name,
                "size": file.size,
                "format": file.format,
            }
        return payload

    def reduced_payload(self, access: SharedFileAccess) -> Dict[str, Any]:
        link, file = access.link, access.file
        return {
            "shareId": link.id,
            "requiresPassword": True,
            "permissions": {
                "canView": link.can_view,
                "canDownload": link.can_download,
            },
            "file": {
                "name": file.name,
                "format": file.format,
                "size": file.size,
            },
            "expiresAt": _iso(link.expires_at),
        }

    def public_payload(self, access: SharedFileAccess) -> Dict[str, Any]:
        link, file, decision = access.link, access.file, access.decision
        file_payload = {
            "id": file.id,
            "name": file.name,
            "format": file.format,
            "size": file.size,
            "uploadedOn": _iso(file.created_at),
        }
        if decision.can_view:
            file_payload["url"] = file.url
            file_payload["thumbnailUrl"] = file.thumbnail_url

        return {
            "shareId": link.id,
            "shareToken": link.share_token,
            "requiresPassword": False,
            "permissions": {
                "canView": decision.can_view,
                "canDownload": decision.can_download,
                "hasPassword": link.is_password_protected,
            },
            "file": file_payload,
            "sharedBy": {"id": link.owner_id},
            "downloadCount": link.download_count,
            "maxDownloads": link.max_downloads,
            "remainingDownloads": link.remaining_downloads(),
            "expiresAt": _iso(link.expires_at),
        }

    @staticmethod
    def _defaults_from(options: Dict[str, Any]) -> ShareDefaults:
        return ShareDefaults(
            can_view=options.get("canView", True),
            can_download=options.get("canDownload", True),
            password=options.get("password") or None,
            expires_in_days=options.get("expiresInDays"),
            max_downloads=options.get("maxDownloads"),
        )

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)
