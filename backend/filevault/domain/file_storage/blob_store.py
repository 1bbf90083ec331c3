"""
Blob Store Interface

Port for uploading, reading and deleting file content in the remote store.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class StoredBlob:
    """Location of uploaded content in the remote store."""
    asset_id: str
    url: str


class IBlobStore(ABC):
    """
    Interface for the remote content store.

    Implementations raise StorageError on failure.
    """

    @abstractmethod
    def upload(self, content: bytes, filename: str, mime_type: str) -> StoredBlob:
        """
        Upload file content.

        Args:
            content: Raw file bytes
            filename: Original file name
            mime_type: MIME type of the content

        Returns:
            StoredBlob with the asset id and delivery URL
        """
        pass  # pragma: no cover

    @abstractmethod
    def delete(self, asset_id: str) -> bool:
        """
        Delete uploaded content.

        Returns:
            True if the asset was deleted or was already gone
        """
        pass  # pragma: no cover

    @abstractmethod
    def open_stream(self, url: str) -> Iterator[bytes]:
        """
        Open stored content for reading.

        Errors opening the content are raised before the first chunk is
        yielded.

        Args:
            url: Delivery URL of the content

        Returns:
            Iterator over the content in chunks
        """
        pass  # pragma: no cover
