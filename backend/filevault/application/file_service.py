"""
File Service

Application service behind the /files endpoints. Coordinates the file
manager and the thumbnail pipeline, publishes file events and shapes
response payloads.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterator, Optional, Tuple

from ..domain.errors import StorageError
from ..domain.events import (
    FileDeletedEvent,
    FileRestoredEvent,
    FileTrashedEvent,
    FileUploadedEvent,
)
from ..domain.file_storage.entities import StoredFile
from ..domain.file_storage.services import FileManager
from ..domain.file_storage.value_objects import PageRequest, PageResult
from .event_publisher import EventPublisher
from .thumbnail_result import ThumbnailResult
from .thumbnail_service import ThumbnailService

logger = logging.getLogger(__name__)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_file(file: StoredFile) -> Dict[str, Any]:
    """Owner-facing representation of a stored file."""
    return {
        "id": file.id,
        "name": file.name,
        "format": file.format,
        "mimeType": file.mime_type,
        "size": file.size,
        "url": file.url,
        "thumbnailUrl": file.thumbnail_url,
        "thumbnailIsFallback": file.thumbnail_is_fallback,
        "isDeleted": file.is_deleted,
        "deletedAt": _iso(file.deleted_at),
        "createdAt": _iso(file.created_at),
        "updatedAt": _iso(file.updated_at),
    }


def serialize_page(result: PageResult[StoredFile]) -> Dict[str, Any]:
    return {
        "files": [serialize_file(f) for f in result.items],
        "pagination": result.pagination(),
    }


class FileService:
    """
    Application service for owner file operations.

    Upload workflow:
    1. Validate and upload the content to the blob store
    2. Persist the StoredFile
    3. For PDFs, run the thumbnail pipeline within its time budget
    4. Publish FileUploadedEvent

    The upload response is never failed by thumbnail problems.
    """

    def __init__(
        self,
        file_manager: FileManager,
        thumbnail_service: ThumbnailService,
        event_publisher: Optional[EventPublisher] = None,
    ):
        self.file_manager = file_manager
        self.thumbnail_service = thumbnail_service
        self.event_publisher = event_publisher

    def upload(self, owner_id: str, content: bytes, filename: str, mime_type: str) -> Dict[str, Any]:
        """
        Upload and register a file.

        Returns:
            Serialized file

        Raises:
            InvalidFileRequestError, FileTooLargeError,
            UnsupportedFileTypeError, StorageError
        """
        file = self.file_manager.store_upload(owner_id, content, filename, mime_type)
        self.file_manager.register(file)

        if file.is_pdf:
            try:
                self.thumbnail_service.generate_and_store(file)
            except StorageError as e:
                logger.error(f"Could not store thumbnail for file {file.id}: {e}")

        self._publish(FileUploadedEvent(
            aggregate_id=file.id,
            occurred_at=datetime.utcnow(),
            owner_id=owner_id,
            name=file.name,
            size=file.size,
            mime_type=file.mime_type,
        ))
        return serialize_file(file)

    def list_files(
        self,
        owner_id: str,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        result = self.file_manager.list_files(
            owner_id, PageRequest(page, limit), search=search, file_format=file_type
        )
        return serialize_page(result)

    def list_trash(self, owner_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        return serialize_page(self.file_manager.list_trash(owner_id, PageRequest(page, limit)))

    def rename(self, file_id: str, owner_id: str, new_name: str) -> Dict[str, Any]:
        return serialize_file(self.file_manager.rename(file_id, owner_id, new_name))

    def trash(self, file_id: str, owner_id: str) -> Dict[str, Any]:
        file = self.file_manager.trash(file_id, owner_id)
        self._publish(FileTrashedEvent(
            aggregate_id=file.id, occurred_at=datetime.utcnow(), owner_id=owner_id
        ))
        return serialize_file(file)

    def restore(self, file_id: str, owner_id: str) -> Dict[str, Any]:
        file = self.file_manager.restore(file_id, owner_id)
        self._publish(FileRestoredEvent(
            aggregate_id=file.id, occurred_at=datetime.utcnow(), owner_id=owner_id
        ))
        return serialize_file(file)

    def delete(self, file_id: str, owner_id: str) -> None:
        file = self.file_manager.delete_permanently(file_id, owner_id)
        self._publish(FileDeletedEvent(
            aggregate_id=file.id, occurred_at=datetime.utcnow(), owner_id=owner_id
        ))

    def download_url(self, file_id: str, owner_id: str) -> str:
        return self.file_manager.get_owned_file(file_id, owner_id).url

    def open_for_viewing(self, file_id: str, owner_id: str) -> Tuple[StoredFile, Iterator[bytes]]:
        return self.file_manager.open_content(file_id, owner_id)

    def refresh_thumbnail(self, file_id: str, owner_id: str) -> tuple[Dict[str, Any], ThumbnailResult]:
        """
        Regenerate a PDF thumbnail.

        Returns:
            Tuple of (serialized file, thumbnail result)
        """
        file, result = self.thumbnail_service.refresh_thumbnail(file_id, owner_id)
        return serialize_file(file), result

    def purge_trash(self, retention_days: int) -> int:
        """Permanently delete files trashed longer than retention_days."""
        purged = self.file_manager.purge_trash(retention_days)
        for file in purged:
            self._publish(FileDeletedEvent(
                aggregate_id=file.id,
                occurred_at=datetime.utcnow(),
                owner_id=file.owner_id,
                reason="retention",
            ))
        return len(purged)

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)
