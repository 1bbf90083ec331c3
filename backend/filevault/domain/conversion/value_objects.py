"""
Conversion Value Objects

Immutable value objects describing conversion requests and job status,
plus helpers that interpret the remote service's loosely shaped payloads.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import ConversionFailedError, NoTokenError


SUPPORTED_TARGET_FORMATS = ("jpg", "png")


class ConversionState(Enum):
    """Status reported by the remote service for a conversion job."""
    PENDING = "pending"
    PROCESSING = "processing"
    FINISHED = "finished"
    FAILED = "failed"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str) -> "ConversionState":
        """Map an upstream status string, returning UNKNOWN for new values."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN

    def is_terminal(self) -> bool:
        return self in (ConversionState.FINISHED, ConversionState.FAILED, ConversionState.CANCELLED)


@dataclass(frozen=True)
class ConversionRequest:
    """
    Value object for a single-page document conversion request.

    Attributes:
        asset_id: Remote asset id of the source document
        target_format: Raster output format
        page: 1-based page number
    """
    asset_id: str
    target_format: str = "jpg"
    page: int = 1

    def __post_init__(self):
        if not self.asset_id or not isinstance(self.asset_id, str):
            raise ValueError("Conversion request requires an asset id")
        if self.target_format not in SUPPORTED_TARGET_FORMATS:
            raise ValueError(
                f"Unsupported target format: {self.target_format}. "
                f"Must be one of {SUPPORTED_TARGET_FORMATS}"
            )
        if not isinstance(self.page, int) or self.page < 1:
            raise ValueError(f"Page must be a positive integer, got {self.page}")

    @property
    def path(self) -> str:
        """Conversion path understood by the remote service."""
        return f"{self.asset_id}/document/-/format/{self.target_format}/-/page/{self.page}/"


@dataclass(frozen=True)
class ConversionStatus:
    """
    Parsed conversion job status.

    Attributes:
        state: Normalized job state
        error: Upstream error detail, if any
        result: Raw result entry, object or list depending on the upstream
    """
    state: ConversionState
    error: Optional[str] = None
    result: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> "ConversionStatus":
        """
        Parse a raw status payload.

        Raises:
            ConversionFailedError: If the payload is not a mapping with a status
        """
        if not isinstance(payload, dict):
            raise ConversionFailedError(
                f"Malformed conversion status payload: expected object, got {type(payload).__name__}"
            )

        status = payload.get("status")
        if not status or not isinstance(status, str):
            raise ConversionFailedError("Malformed conversion status payload: missing status")

        error = payload.get("error")
        return cls(
            state=ConversionState.parse(status),
            error=str(error) if error else None,
            result=payload.get("result"),
        )


def normalize_result_asset_id(result: Any) -> Optional[str]:
    """
    Extract the result asset id from a finished job's result entry.

    The remote service returns either a single object or a list of objects;
    only the first element of a list is considered.

    Returns:
        Asset id, or None when none can be extracted
    """
    if isinstance(result, list):
        if not result:
            return None
        result = result[0]

    if not isinstance(result, dict):
        return None

    uuid = result.get("uuid")
    if not uuid or not isinstance(uuid, str):
        return None
    return uuid


def extract_job_token(payload: Dict[str, Any], path: str) -> str:
    """
    Extract the job token for a conversion path from a submission payload.

    Raises:
        ConversionFailedError: If the service reported a problem for the path
        NoTokenError: If no job token was returned
    """
    if not isinstance(payload, dict):
        raise NoTokenError("Conversion submission returned a malformed payload")

    problems = payload.get("problems") or {}
    if isinstance(problems, dict) and problems:
        detail = problems.get(path) or next(iter(problems.values()))
        raise ConversionFailedError(
            f"Conversion request rejected: {detail}", detail=str(detail)
        )

    results = payload.get("result") or []
    if isinstance(results, dict):
        results = [results]

    for entry in results:
        if not isinstance(entry, dict):
            continue
        token = entry.get("token")
        if token is None or token == "":
            continue
        source = entry.get("original_source")
        if source is None or source == path or len(results) == 1:
            return str(token)

    raise NoTokenError("Conversion submission returned no job token")
