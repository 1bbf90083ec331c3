"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions bridge them to user-facing messages and HTTP statuses.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    FILE_NOT_FOUND = "file_not_found"
    FILE_NOT_PDF = "file_not_pdf"
    UNSUPPORTED_FILE_TYPE = "unsupported_file_type"
    FILE_TOO_LARGE = "file_too_large"
    SHARE_NOT_FOUND = "share_not_found"
    SHARE_EXPIRED = "share_expired"
    QUOTA_EXCEEDED = "quota_exceeded"
    PASSWORD_REQUIRED = "password_required"
    PASSWORD_INCORRECT = "password_incorrect"
    PASSWORD_NOT_SET = "password_not_set"
    DOWNLOAD_NOT_ALLOWED = "download_not_allowed"
    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED = "unauthorized"
    CONVERSION_FAILED = "conversion_failed"
    CONVERSION_TIMEOUT = "conversion_timeout"
    STORAGE_ERROR = "storage_error"
    SYSTEM_ERROR = "system_error"


# User-friendly error messages with actionable guidance
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.FILE_NOT_FOUND: {
        "title": "File Not Found",
        "message": "The file could not be found or you don't have permission to access it.",
        "action": "Check the file identifier and try again.",
    },
    ErrorCategory.FILE_NOT_PDF: {
        "title": "Not a PDF",
        "message": "Thumbnails can only be generated for PDF documents.",
        "action": "Select a PDF file.",
    },
    ErrorCategory.UNSUPPORTED_FILE_TYPE: {
        "title": "Unsupported File Type",
        "message": "This type of file cannot be uploaded.",
        "action": "Upload an image, text, PDF, or office document.",
    },
    ErrorCategory.FILE_TOO_LARGE: {
        "title": "File Too Large",
        "message": "The file exceeds the maximum allowed upload size.",
        "action": "Compress the file or upload a smaller one.",
    },
    ErrorCategory.SHARE_NOT_FOUND: {
        "title": "Share Link Not Found",
        "message": "This share link does not exist or has been revoked.",
        "action": "Ask the owner for a new link.",
    },
    ErrorCategory.SHARE_EXPIRED: {
        "title": "Share Link Expired",
        "message": "This share link has expired.",
        "action": "Ask the owner to extend the link or create a new one.",
    },
    ErrorCategory.QUOTA_EXCEEDED: {
        "title": "Download Limit Reached",
        "message": "This share link has reached its maximum number of downloads.",
        "action": "Ask the owner to raise the download limit.",
    },
    ErrorCategory.PASSWORD_REQUIRED: {
        "title": "Password Required",
        "message": "This shared file is password protected.",
        "action": "Enter the password to access the file.",
    },
    ErrorCategory.PASSWORD_INCORRECT: {
        "title": "Incorrect Password",
        "message": "The password you entered is incorrect.",
        "action": "Check the password and try again.",
    },
    ErrorCategory.PASSWORD_NOT_SET: {
        "title": "Not Password Protected",
        "message": "This shared file is not password protected.",
        "action": "Open the link directly.",
    },
    ErrorCategory.DOWNLOAD_NOT_ALLOWED: {
        "title": "Download Not Allowed",
        "message": "Downloading is disabled for this shared file.",
        "action": "Ask the owner to enable downloads.",
    },
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.UNAUTHORIZED: {
        "title": "Authentication Required",
        "message": "A valid access token is required for this operation.",
        "action": "Sign in again and retry.",
    },
    ErrorCategory.CONVERSION_FAILED: {
        "title": "Thumbnail Generation Failed",
        "message": "The document preview could not be generated.",
        "action": "Please try again later.",
    },
    ErrorCategory.CONVERSION_TIMEOUT: {
        "title": "Thumbnail Generation Timed Out",
        "message": "The document preview took too long to generate.",
        "action": "Please try again later.",
    },
    ErrorCategory.STORAGE_ERROR: {
        "title": "Storage Error",
        "message": "The file storage service could not complete the operation.",
        "action": "Please try again later.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# HTTP status codes returned for each category
HTTP_STATUS: Dict[ErrorCategory, int] = {
    ErrorCategory.FILE_NOT_FOUND: 404,
    ErrorCategory.SHARE_NOT_FOUND: 404,
    ErrorCategory.SHARE_EXPIRED: 403,
    ErrorCategory.QUOTA_EXCEEDED: 403,
    ErrorCategory.DOWNLOAD_NOT_ALLOWED: 403,
    ErrorCategory.PASSWORD_REQUIRED: 400,
    ErrorCategory.PASSWORD_NOT_SET: 400,
    ErrorCategory.INVALID_REQUEST: 400,
    ErrorCategory.FILE_NOT_PDF: 400,
    ErrorCategory.UNSUPPORTED_FILE_TYPE: 400,
    ErrorCategory.FILE_TOO_LARGE: 400,
    ErrorCategory.PASSWORD_INCORRECT: 401,
    ErrorCategory.UNAUTHORIZED: 401,
    ErrorCategory.CONVERSION_FAILED: 502,
    ErrorCategory.CONVERSION_TIMEOUT: 504,
    ErrorCategory.STORAGE_ERROR: 500,
    ErrorCategory.SYSTEM_ERROR: 500,
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Every domain error carries an ErrorCategory so callers can branch on
    the kind of failure without matching message strings.
    """

    category: ErrorCategory = ErrorCategory.SYSTEM_ERROR

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


# ---------------------------------------------------------------------------
# Polling
# ---------------------------------------------------------------------------

class PollingTimeoutError(DomainError):
    """Raised by RetrySchedule when the deadline passes without a result."""

    def __init__(self, message: str, attempts: int = 0):
        super().__init__(message)
        self.attempts = attempts


class PollingCancelledError(DomainError):
    """Raised when a polling loop is cancelled through its cancel event."""
    pass


# ---------------------------------------------------------------------------
# Remote asset service / conversion
# ---------------------------------------------------------------------------

class AssetGatewayError(DomainError):
    """
    Raised by asset gateway adapters when the remote service cannot be reached
    or answers with an error status.
    """

    category = ErrorCategory.CONVERSION_FAILED

    def __init__(self, message: str, status_code: Optional[int] = None,
                 original_error: Exception = None):
        super().__init__(message, original_error)
        self.status_code = status_code


class ReadinessTimeoutError(DomainError):
    """Raised when a stored asset does not become servable in time."""

    category = ErrorCategory.CONVERSION_TIMEOUT


class ConversionError(DomainError):
    """Base exception for document conversion failures."""

    category = ErrorCategory.CONVERSION_FAILED


class ConversionFailedError(ConversionError):
    """
    Raised when the conversion job fails upstream or the upstream payload
    violates the expected contract.
    """

    def __init__(self, message: str, detail: Optional[str] = None,
                 original_error: Exception = None):
        super().__init__(message, original_error)
        self.detail = detail


class NoTokenError(ConversionFailedError):
    """Raised when a conversion submission returns no job token."""
    pass


class NoResultAssetError(ConversionFailedError):
    """Raised when a finished conversion carries no result asset id."""
    pass


class ConversionTimeoutError(ConversionError):
    """Raised when a conversion job does not finish within its budget."""

    category = ErrorCategory.CONVERSION_TIMEOUT


# ---------------------------------------------------------------------------
# Stored files
# ---------------------------------------------------------------------------

class StoredFileNotFoundError(DomainError):
    """
    Raised when a file does not exist or is not owned by the caller.

    Both conditions are reported identically.
    """

    category = ErrorCategory.FILE_NOT_FOUND


class FileNotPdfError(DomainError):
    """Raised when a PDF-only operation targets another format."""

    category = ErrorCategory.FILE_NOT_PDF


class UnsupportedFileTypeError(DomainError):
    """Raised when an upload has a MIME type outside the allowed table."""

    category = ErrorCategory.UNSUPPORTED_FILE_TYPE


class FileTooLargeError(DomainError):
    """Raised when an upload exceeds the configured size limit."""

    category = ErrorCategory.FILE_TOO_LARGE


class InvalidFileRequestError(DomainError):
    """Raised for malformed file operations (empty upload, blank name)."""

    category = ErrorCategory.INVALID_REQUEST


class StorageError(DomainError):
    """Raised when the blob store or the metadata repository fails."""

    category = ErrorCategory.STORAGE_ERROR


# ---------------------------------------------------------------------------
# Share links
# ---------------------------------------------------------------------------

class ShareAccessError(DomainError):
    """Base exception for share-link access and management failures."""
    pass


class ShareNotFoundError(ShareAccessError):
    """
    Raised when a share link is missing, revoked, or not owned by the caller.

    All three conditions are reported identically.
    """

    category = ErrorCategory.SHARE_NOT_FOUND


class ShareExpiredError(ShareAccessError):
    """Raised when a share link's expiry timestamp has passed."""

    category = ErrorCategory.SHARE_EXPIRED


class QuotaExceededError(ShareAccessError):
    """Raised when a share link has used up its download quota."""

    category = ErrorCategory.QUOTA_EXCEEDED


class PasswordRequiredError(ShareAccessError):
    """Raised when content is requested from a protected link without a password."""

    category = ErrorCategory.PASSWORD_REQUIRED


class PasswordIncorrectError(ShareAccessError):
    """Raised when the supplied password does not match the link."""

    category = ErrorCategory.PASSWORD_INCORRECT


class PasswordNotSetError(ShareAccessError):
    """Raised when verifying a password on a link that has none."""

    category = ErrorCategory.PASSWORD_NOT_SET


class DownloadNotAllowedError(ShareAccessError):
    """Raised when downloading through a link whose download permission is off."""

    category = ErrorCategory.DOWNLOAD_NOT_ALLOWED


class InvalidShareRequestError(ShareAccessError):
    """Raised for malformed share-link settings."""

    category = ErrorCategory.INVALID_REQUEST


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    This is an application-layer concern that bridges domain errors
    with user-facing error messages and HTTP responses. The technical
    message is kept for logs and never rendered to clients.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]
        self.http_status_code = HTTP_STATUS.get(category, 500)

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        return {
            "success": False,
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: Optional[int] = None,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional context information
        status_code: HTTP status code, defaults to the category's status

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code or error.http_status_code


def error_response_for(error: DomainError) -> tuple[Dict[str, Any], int]:
    """Create the API response for a domain error using its category."""
    return create_error_response(error.category, str(error))
