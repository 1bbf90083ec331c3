"""
Asset Gateway Interface

Port for the remote asset service that stores files and converts documents.
Adapters raise AssetGatewayError for transport and HTTP failures.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ReadyInfo:
    """Readiness snapshot of a stored asset."""
    asset_id: str
    is_ready: bool
    mime_type: Optional[str] = None
    size: Optional[int] = None


class IAssetGateway(ABC):
    """
    Interface for the remote conversion and delivery service.

    Payload-returning methods hand back the decoded JSON body; interpreting it
    is the domain's job so that contract violations surface as typed errors.
    """

    @abstractmethod
    def submit_conversion(self, paths: List[str]) -> Dict[str, Any]:
        """
        Submit document conversion jobs.

        Args:
            paths: Conversion request paths

        Returns:
            Raw submission payload with "problems" and "result" entries
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_conversion_status(self, token: str) -> Any:
        """
        Query the status of a conversion job.

        Args:
            token: Job token returned on submission

        Returns:
            Raw status payload
        """
        pass  # pragma: no cover

    @abstractmethod
    def get_asset_info(self, asset_id: str) -> ReadyInfo:
        """Query whether a stored asset is ready to be served and converted."""
        pass  # pragma: no cover

    @abstractmethod
    def content_url(self, asset_id: str) -> str:
        """Build the public delivery URL of an asset."""
        pass  # pragma: no cover

    @abstractmethod
    def preview_url(self, asset_id: str, size: int) -> str:
        """Build the degraded preview URL used when conversion fails."""
        pass  # pragma: no cover
