"""
Sharing Repositories

Repository interface for share link persistence.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from .entities import ShareLink


class ShareLinkRepository(ABC):
    """
    Abstract repository interface for share links.

    Implementations enforce at most one active link per (file, owner) and
    perform download counting as a single conditional update.
    """

    @abstractmethod
    def get(self, share_id: str) -> Optional[ShareLink]:
        """Retrieve a link by id, active or not."""
        pass  # pragma: no cover

    @abstractmethod
    def get_by_token(self, share_token: str) -> Optional[ShareLink]:
        """Retrieve a link by its public token, active or not."""
        pass  # pragma: no cover

    @abstractmethod
    def get_active_for(self, file_id: str, owner_id: str) -> Optional[ShareLink]:
        """Retrieve the active link for a (file, owner) pair."""
        pass  # pragma: no cover

    @abstractmethod
    def create_if_absent(self, link: ShareLink) -> Tuple[ShareLink, bool]:
        """
        Store a new link unless an active one exists for its (file, owner).

        The existence check and the insert are a single atomic step.

        Returns:
            Tuple of (stored link, created). When created is False the
            returned link is the existing active one.
        """
        pass  # pragma: no cover

    @abstractmethod
    def update_settings(self, link: ShareLink) -> bool:
        """
        Persist permission, password, expiry and quota settings.

        download_count and is_active are never written by this method.

        Returns:
            True if the link exists and is active, False otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def deactivate(self, share_id: str) -> bool:
        """
        Mark a link inactive and release its (file, owner) claim.

        Returns:
            True if an active link was deactivated
        """
        pass  # pragma: no cover

    @abstractmethod
    def increment_download_count(self, share_id: str) -> Optional[int]:
        """
        Atomically add one download if the link is active and under quota.

        Returns:
            New download count, or None if the link is inactive, missing,
            or already at its quota
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_active_by_owner(self, owner_id: str) -> List[ShareLink]:
        """Active links owned by owner_id, newest first."""
        pass  # pragma: no cover
