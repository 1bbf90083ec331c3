"""
File Storage Repositories

Repository interface for stored file metadata persistence.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .entities import StoredFile
from .value_objects import PageRequest, PageResult


class FileRepository(ABC):
    """Abstract repository interface for stored file metadata."""

    @abstractmethod
    def save(self, file: StoredFile) -> bool:
        """
        Insert or replace file metadata.

        Args:
            file: StoredFile to save

        Returns:
            True if successful, False otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def get(self, file_id: str) -> Optional[StoredFile]:
        """
        Retrieve a file by id, regardless of owner or trash state.

        Returns:
            StoredFile if found, None otherwise
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, file_id: str) -> bool:
        """
        Remove file metadata permanently.

        Returns:
            True if deleted, False if it did not exist
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_by_owner(
        self,
        owner_id: str,
        page: PageRequest,
        deleted: bool = False,
        search: Optional[str] = None,
        file_format: Optional[str] = None,
    ) -> PageResult[StoredFile]:
        """
        List an owner's files, newest first.

        Args:
            owner_id: Owner user id
            page: Page to return
            deleted: True to list the trash instead of live files
            search: Case-insensitive substring filter on the name
            file_format: Exact format tag filter

        Returns:
            PageResult with the requested page and total match count
        """
        pass  # pragma: no cover

    @abstractmethod
    def find_trashed_before(self, cutoff: datetime) -> List[StoredFile]:
        """Files whose deleted_at is older than cutoff."""
        pass  # pragma: no cover

    @abstractmethod
    def find_fallback_thumbnails(self, limit: int = 50) -> List[StoredFile]:
        """Live PDF files whose thumbnail is missing or a fallback preview."""
        pass  # pragma: no cover

    def get_owned(self, file_id: str, owner_id: str) -> Optional[StoredFile]:
        """
        Retrieve a file only if owner_id owns it.

        Returns:
            StoredFile if found and owned, None otherwise
        """
        file = self.get(file_id)
        if file is None or not file.is_owned_by(owner_id):
            return None
        return file
